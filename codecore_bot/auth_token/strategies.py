"""Token acquisition strategies selected by configuration."""

from __future__ import annotations

import asyncio
import logging
import secrets
import webbrowser
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from ..constants import (
    OAUTH_CALLBACK_TIMEOUT_SECONDS,
    OAUTH_STATE_BYTES,
    TWITCH_AUTHORIZE_URL,
)
from .callback_listener import OAuthCallbackListener
from .client import TokenExchangeClient
from .types import Credential

if TYPE_CHECKING:  # pragma: no cover
    from ..config.model import BotConfig

AuthorizeUrlHandler = Callable[[str], Awaitable[None]]


def new_state() -> str:
    """Fresh opaque value binding one authorization request to its callback."""
    return secrets.token_urlsafe(OAUTH_STATE_BYTES)


async def present_authorize_url(url: str) -> None:
    """Default way of sending the user to the authorization page."""
    logging.info(f"🌐 Open this URL to authorize the bot: {url}")
    opened = await asyncio.to_thread(webbrowser.open, url)
    if not opened:
        logging.info("👉 No browser available - copy the URL above manually")


class TokenAcquisitionStrategy(ABC):
    """Obtains a Credential through a TokenExchangeClient."""

    name: str = "abstract"

    @abstractmethod
    async def acquire(
        self, client: TokenExchangeClient, stop_event: asyncio.Event | None = None
    ) -> Credential:
        """Return a fresh credential or raise an auth/token error."""


class ClientCredentialsStrategy(TokenAcquisitionStrategy):
    """Direct POST of the application's id/secret; no user interaction."""

    name = "client_credentials"

    def __init__(self, grant_type: str = "client_credentials", scope: str | None = None):
        self.grant_type = grant_type
        self.scope = scope

    async def acquire(
        self, client: TokenExchangeClient, stop_event: asyncio.Event | None = None
    ) -> Credential:
        logging.info(f"🔐 Requesting token grant={self.grant_type}")
        return await client.exchange_client_credentials(self.grant_type, self.scope)


class AuthorizationCodeStrategy(TokenAcquisitionStrategy):
    """Browser redirect flow with a temporary local callback listener.

    Order per attempt: new state, bind listener (wait until ready), present
    the authorization URL, wait for the callback, exchange the code. A state
    value is used for exactly one attempt.
    """

    name = "authorization_code"

    def __init__(
        self,
        client_id: str,
        *,
        host: str = "localhost",
        port: int = 3000,
        scope: str = "",
        authorize_url: str = TWITCH_AUTHORIZE_URL,
        timeout: float = OAUTH_CALLBACK_TIMEOUT_SECONDS,
        url_handler: AuthorizeUrlHandler | None = None,
        state_factory: Callable[[], str] = new_state,
    ):
        self.client_id = client_id
        self.host = host
        self.port = port
        self.scope = scope
        self.authorize_url = authorize_url
        self.timeout = timeout
        self.url_handler = url_handler or present_authorize_url
        self.state_factory = state_factory

    def build_authorize_url(self, state: str, redirect_uri: str) -> str:
        query = urlencode(
            {
                "response_type": "code",
                "client_id": self.client_id,
                "redirect_uri": redirect_uri,
                "scope": self.scope,
                "state": state,
            }
        )
        return f"{self.authorize_url}?{query}"

    async def acquire(
        self, client: TokenExchangeClient, stop_event: asyncio.Event | None = None
    ) -> Credential:
        state = self.state_factory()
        listener = OAuthCallbackListener(
            state, host=self.host, port=self.port, timeout=self.timeout
        )
        await listener.start()
        try:
            await listener.ready.wait()
            redirect_uri = listener.redirect_uri
            await self.url_handler(self.build_authorize_url(state, redirect_uri))
            code = await listener.wait_for_code(stop_event=stop_event)
        finally:
            await listener.stop()
        return await client.exchange_authorization_code(code, redirect_uri)


def build_strategy(
    config: BotConfig, url_handler: AuthorizeUrlHandler | None = None
) -> TokenAcquisitionStrategy:
    """Pick the strategy named by ``config.permissions``."""
    if config.uses_authorization_code:
        return AuthorizationCodeStrategy(
            config.client_id,
            host=config.listen_url,
            port=config.listen_port,
            scope=config.scope,
            authorize_url=config.authorize_url,
            url_handler=url_handler,
        )
    return ClientCredentialsStrategy(grant_type=config.permissions, scope=config.scope or None)
