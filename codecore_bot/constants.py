"""
Configuration constants for the C0deC0re chat bot

This module contains the tunables used throughout the application.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Same contract as ``_get_env_int`` but for floats.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Chat server defaults
IRC_DEFAULT_SERVER = "irc.chat.twitch.tv"
IRC_DEFAULT_PORT = 6667
IRC_PING_LINE = "PING :tmi.twitch.tv"  # Keep-alive request, matched exactly
IRC_PONG_REPLY = "PONG :tmi.twitch.tv"

# Outbound chat rate (seconds between messages)
DEFAULT_MESSAGE_INTERVAL_SECONDS = _get_env_float(
    "DEFAULT_MESSAGE_INTERVAL_SECONDS", 1.5
)

# Connection / reconnection
IRC_CONNECT_TIMEOUT_SECONDS = _get_env_float(
    "IRC_CONNECT_TIMEOUT_SECONDS", 15.0
)  # Per-attempt dial timeout
IRC_CONNECT_MAX_ATTEMPTS = _get_env_int(
    "IRC_CONNECT_MAX_ATTEMPTS", 6
)  # Bounded reconnection attempts per session
IRC_CONNECT_BACKOFF_BASE_SECONDS = _get_env_float(
    "IRC_CONNECT_BACKOFF_BASE_SECONDS", 1.0
)  # Exponential backoff multiplier
IRC_CONNECT_BACKOFF_MAX_SECONDS = _get_env_float(
    "IRC_CONNECT_BACKOFF_MAX_SECONDS", 60.0
)  # Backoff ceiling

# Supervisor
SUPERVISOR_RESTART_DELAY_SECONDS = _get_env_float(
    "SUPERVISOR_RESTART_DELAY_SECONDS", 1.0
)  # Fixed pause before restarting a failed session
SUPERVISOR_MAX_RESTARTS = _get_env_int(
    "SUPERVISOR_MAX_RESTARTS", 20
)  # Consecutive transient failures tolerated (0 = unlimited)

# OAuth
TWITCH_AUTHORIZE_URL = "https://id.twitch.tv/oauth2/authorize"
TWITCH_TOKEN_URL = "https://id.twitch.tv/oauth2/token"  # nosec B105  # noqa: S105
TWITCH_VALIDATE_URL = "https://id.twitch.tv/oauth2/validate"
OAUTH_CALLBACK_TIMEOUT_SECONDS = _get_env_float(
    "OAUTH_CALLBACK_TIMEOUT_SECONDS", 300.0
)  # How long to wait for the browser redirect
OAUTH_STATE_BYTES = _get_env_int("OAUTH_STATE_BYTES", 16)

# Network/HTTP constants
HTTP_REQUEST_TIMEOUT_SECONDS = _get_env_int(
    "HTTP_REQUEST_TIMEOUT_SECONDS", 30
)  # Default HTTP request timeout
