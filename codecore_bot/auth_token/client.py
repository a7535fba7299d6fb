"""Token endpoint HTTP client: authorization-code / client-credentials exchange and validation."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

import aiohttp

from ..constants import HTTP_REQUEST_TIMEOUT_SECONDS, TWITCH_TOKEN_URL, TWITCH_VALIDATE_URL
from ..errors.internal import TokenExchangeError, TransportError
from ..utils import format_duration
from .types import Credential

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class TokenExchangeClient:
    """Client for exchanging grants for access tokens and validating them.

    Both exchange shapes are form-encoded POSTs to the configured token
    endpoint. The HTTP session is owned by the caller.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http_session: aiohttp.ClientSession,
        token_url: str = TWITCH_TOKEN_URL,
        validate_url: str = TWITCH_VALIDATE_URL,
    ):
        """Initialize the token client.

        Args:
            client_id: Application client ID.
            client_secret: Application client secret.
            http_session: HTTP session for making requests.
            token_url: Token endpoint.
            validate_url: Token validation endpoint.
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = http_session
        self.token_url = token_url
        self.validate_url = validate_url

    async def exchange_client_credentials(
        self, grant_type: str = "client_credentials", scope: str | None = None
    ) -> Credential:
        """Exchange the application's own credentials for a token."""
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": grant_type,
        }
        if scope:
            data["scope"] = scope
        return await self.exchange(data)

    async def exchange_authorization_code(self, code: str, redirect_uri: str) -> Credential:
        """Exchange an authorization code received on the redirect callback."""
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        }
        return await self.exchange(data)

    async def exchange(self, form: Mapping[str, str]) -> Credential:
        """POST a form to the token endpoint and decode the credential.

        Raises:
            TokenExchangeError: On network failure, non-200 status, or a body
                that is not JSON or lacks ``access_token``.
        """
        grant = form.get("grant_type", "?")
        headers = {"Content-Type": FORM_CONTENT_TYPE}
        timeout = aiohttp.ClientTimeout(total=HTTP_REQUEST_TIMEOUT_SECONDS)
        try:
            async with self.session.post(
                self.token_url, data=dict(form), headers=headers, timeout=timeout
            ) as resp:
                status = resp.status
                body = await resp.text()
        except TimeoutError as e:
            raise TokenExchangeError("Token exchange timeout") from e
        except aiohttp.ClientError as e:
            raise TokenExchangeError(f"Network error during token exchange: {e}") from e

        if status != 200:
            logging.error(
                f"❌ Token exchange failed (status={status}) grant={grant} client_id={self.client_id}"
            )
            raise TokenExchangeError(
                f"Token endpoint returned HTTP {status}", status=status, body=body
            )

        try:
            payload = json.loads(body)
            if not isinstance(payload, dict):
                raise ValueError("Token response is not a JSON object")
            credential = Credential.from_response(payload)
        except ValueError as e:
            raise TokenExchangeError(
                f"Malformed token response: {e}", status=status, body=body
            ) from e

        logging.info(
            f"🔑 Token obtained (lifetime {format_duration(credential.expires_in_seconds)}) grant={grant} type={credential.token_type}"
        )
        return credential

    async def validate(self, credential: Credential) -> bool:
        """Check a token against the validation endpoint.

        Returns:
            True only on HTTP 200.

        Raises:
            TransportError: If the endpoint could not be reached.
        """
        headers = {"Authorization": f"OAuth {credential.access_token}"}
        timeout = aiohttp.ClientTimeout(total=HTTP_REQUEST_TIMEOUT_SECONDS)
        try:
            async with self.session.get(
                self.validate_url, headers=headers, timeout=timeout
            ) as resp:
                status = resp.status
        except TimeoutError as e:
            logging.warning("⏱️ Token validation timeout")
            raise TransportError("Token validation timeout") from e
        except aiohttp.ClientError as e:
            logging.warning(f"💥 Network error during token validation: {type(e).__name__}")
            raise TransportError(f"Network error during validation: {e}") from e

        if status == 200:
            logging.debug("✅ Token valid")
            return True
        if status == 401:
            logging.info(f"❌ Token validation failed: invalid (status={status})")
        else:
            logging.warning(f"❌ Token validation failed (status={status})")
        return False
