"""Error hierarchy and logging helpers."""

from .handling import is_transient, log_error
from .internal import (
    AuthorizationDeniedError,
    CallbackTimeoutError,
    ConfigError,
    EmptyMessageError,
    InternalError,
    OAuthError,
    StateMismatchError,
    TokenExchangeError,
    TransportError,
)

__all__ = [
    "InternalError",
    "TransportError",
    "EmptyMessageError",
    "OAuthError",
    "StateMismatchError",
    "AuthorizationDeniedError",
    "CallbackTimeoutError",
    "TokenExchangeError",
    "ConfigError",
    "log_error",
    "is_transient",
]
