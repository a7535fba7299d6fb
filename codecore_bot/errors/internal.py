"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the Supervisor's retry versus
halt decision. Raw aiohttp / socket / JSON errors are wrapped into one of these
at the boundary where they occur.

Classes:
  InternalError             – Base for all internal errors.
  TransportError            – Dial/read/write failures on the chat connection (retried).
  EmptyMessageError         – Outbound chat message was empty (never sent).
  OAuthError                – Authorization attempt failures (never retried silently).
    StateMismatchError      – Callback state did not match the expected value.
    AuthorizationDeniedError– Provider reported an authorization error.
    CallbackTimeoutError    – No callback arrived before the listener timeout.
  TokenExchangeError        – Token endpoint rejected the exchange or returned garbage.
  ConfigError               – Credential/config file missing or malformed.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class TransportError(InternalError):
    """Exception raised when the chat transport fails to dial, read or write."""


class EmptyMessageError(InternalError):
    """Exception raised when asked to speak an empty message."""

    def __init__(self, message: str = "cannot speak, message was empty") -> None:
        super().__init__(message)


class OAuthError(InternalError):
    """Exception raised for OAuth authorization failures.

    These errors end the current authorization attempt and are not suitable
    for automatic retry.
    """


class StateMismatchError(OAuthError):
    """Callback carried a ``state`` that does not match the one we issued."""


class AuthorizationDeniedError(OAuthError):
    """Provider redirected back with an ``error`` parameter."""


class CallbackTimeoutError(OAuthError):
    """No authorization callback arrived in time."""


class TokenExchangeError(InternalError):
    """Exception raised when the token endpoint exchange fails.

    Attributes:
        status: HTTP status returned by the endpoint, None when no response.
        body: Raw response body kept for diagnostics.
    """

    def __init__(
        self, message: str, *, status: int | None = None, body: str = ""
    ) -> None:
        super().__init__(message, data={"status": status, "body": body})
        self.status = status
        self.body = body


class ConfigError(InternalError):
    """Exception raised when the credential/config file cannot be used."""


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
]
