r"""
Logging configuration module for the C0deC0re chat bot.

Provides a configurable logging setup using the colorlog library, a filter that
keeps OAuth tokens out of log output, and a structured error logging helper.
"""

import logging
import os
import re
import sys
from typing import Any

import colorlog

_TOKEN_PATTERNS = (
    re.compile(r"(oauth:)[A-Za-z0-9_\-]+", re.IGNORECASE),
    re.compile(r"(['\"]?access_token['\"]?\s*[:=]\s*['\"]?)[A-Za-z0-9_\-]+"),
    re.compile(r"(Authorization:\s*(?:OAuth|Bearer)\s+)[A-Za-z0-9_\-]+", re.IGNORECASE),
)
_REDACTED = "***"


def redact_tokens(text: str) -> str:
    """Replace anything that looks like an OAuth token with a placeholder."""
    for pattern in _TOKEN_PATTERNS:
        text = pattern.sub(rf"\g<1>{_REDACTED}", text)
    return text


class TokenRedactionFilter(logging.Filter):
    """Filter that masks OAuth tokens in log records.

    The record is rewritten in place (message pre-rendered) and always kept.
    """

    def filter(self, record):
        message = record.getMessage()
        redacted = redact_tokens(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context.

    Args:
        error_type: Category of the error (e.g., 'network', 'auth', 'config')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    structured_message = f"[{error_type.upper()}] {message}"

    if exception:
        structured_message += f" | Exception: {type(exception).__name__}: {str(exception)}"

    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"

    logging.log(level, structured_message)


class LoggerConfigurator:
    """Handles logging configuration cleanly using colorlog.

    Supports environment variable configuration for log levels.
    """

    def __init__(self, config=None):
        """Initialize the configurator.

        Args:
            config: Optional config dict; ``stream`` overrides the output stream.
        """
        self.config = config or {}

    def configure(self):
        """Configure logging with colored, timestamped output.

        Uses environment variables:
        - DEBUG: Set to 'true', '1', or 'yes' for DEBUG level, otherwise INFO
        """
        debug_env = os.environ.get("DEBUG", "").lower()
        log_level = logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO

        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={
                "message": {
                    "ERROR": "red",
                    "CRITICAL": "magenta",
                }
            },
            reset=True,
        )

        handler = logging.StreamHandler(self.config.get("stream", sys.stderr))
        handler.setFormatter(formatter)
        handler.addFilter(TokenRedactionFilter())

        logging.basicConfig(
            level=log_level,
            handlers=[handler],
            format="%(message)s",
            force=True,
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        # aiohttp access logs would echo the callback query string (code/state)
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
        return handler
