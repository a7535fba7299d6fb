"""Shared types for the auth_token package."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Credential:
    """Access token issued by the platform's token endpoint.

    Lives for one connection and is never written to disk.

    Attributes:
        access_token: Bearer/OAuth token string.
        token_type: Token type reported by the provider (e.g. "bearer").
        expires_in_seconds: Lifetime reported at issue time.
    """

    access_token: str
    token_type: str
    expires_in_seconds: int

    @classmethod
    def from_response(cls, payload: Mapping[str, Any]) -> Credential:
        """Build from a token endpoint JSON body.

        Raises:
            ValueError: If ``access_token`` is missing/empty or ``expires_in``
                is not an integer.
        """
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("Missing access_token in token response")
        token_type = payload.get("token_type") or ""
        expires_in = payload.get("expires_in", 0)
        if isinstance(expires_in, bool) or not isinstance(expires_in, int | float | str):
            raise ValueError(f"Invalid expires_in in token response: {expires_in!r}")
        if isinstance(expires_in, float) and not math.isfinite(expires_in):
            # json.loads accepts 1e400 / Infinity / NaN
            raise ValueError(f"Non-finite expires_in in token response: {expires_in!r}")
        return cls(
            access_token=access_token,
            token_type=str(token_type),
            expires_in_seconds=int(expires_in),
        )

    @property
    def irc_password(self) -> str:
        """Token as the chat server expects it after PASS."""
        if self.access_token.startswith("oauth:"):
            return self.access_token
        return f"oauth:{self.access_token}"

    def __repr__(self) -> str:
        return (
            f"Credential(access_token='***', token_type={self.token_type!r}, "
            f"expires_in_seconds={self.expires_in_seconds})"
        )
