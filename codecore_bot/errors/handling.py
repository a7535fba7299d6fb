from __future__ import annotations

from ..logging_config import log_structured_error
from .internal import (
    ConfigError,
    InternalError,
    OAuthError,
    TokenExchangeError,
    TransportError,
)


def log_error(message: str, error: Exception, context: dict | None = None) -> None:
    """Logs an error message with the associated exception details.

    The exception is mapped to a coarse category so related failures group
    together in the structured log line.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    error_type = "unknown"
    if isinstance(error, TransportError | OSError | ConnectionError):
        error_type = "network"
    elif isinstance(error, OAuthError):
        error_type = "auth"
    elif isinstance(error, TokenExchangeError):
        error_type = "token"
    elif isinstance(error, ConfigError):
        error_type = "config"
    elif isinstance(error, InternalError):
        error_type = "internal"

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )


def is_transient(error: BaseException) -> bool:
    """Return True if the Supervisor should restart after this error."""
    return isinstance(error, TransportError | OSError | ConnectionError | TimeoutError)
