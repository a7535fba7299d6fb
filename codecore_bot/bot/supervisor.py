"""BotSupervisor: token acquisition, session startup order and restart policy."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from enum import Enum, auto

import aiohttp

from ..auth_token.client import TokenExchangeClient
from ..auth_token.strategies import TokenAcquisitionStrategy, build_strategy
from ..auth_token.types import Credential
from ..config.model import BotConfig
from ..constants import SUPERVISOR_MAX_RESTARTS, SUPERVISOR_RESTART_DELAY_SECONDS
from ..errors.handling import is_transient, log_error
from ..errors.internal import OAuthError, TokenExchangeError, TransportError
from ..irc.models import SessionOutcome
from ..irc.session import ChatSession

SessionFactory = Callable[[BotConfig, Credential, asyncio.Event], ChatSession]


class SupervisorState(Enum):
    IDLE = auto()
    FETCHING_TOKEN = auto()
    CONNECTING = auto()
    RUNNING = auto()


def default_session_factory(
    config: BotConfig, credential: Credential, stop_event: asyncio.Event
) -> ChatSession:
    return ChatSession(config, credential, stop_event=stop_event)


class BotSupervisor:  # pylint: disable=too-many-instance-attributes
    """Runs one bot for one channel until a clean stop or a fatal error.

    Startup order is token, connect, join, read. Transient session failures
    restart from connecting after a fixed delay, keeping the current token
    unless validation says it is no longer good. Token acquisition failures
    are fatal. At most one session is active at a time.

    Attributes:
        config: Bot configuration.
        state: Current orchestration state.
        restarts: Consecutive transient failures of sessions that received no
            traffic.
        stop_event: Set when an external stop was requested.
    """

    def __init__(
        self,
        config: BotConfig,
        *,
        http_session: aiohttp.ClientSession | None = None,
        strategy: TokenAcquisitionStrategy | None = None,
        session_factory: SessionFactory = default_session_factory,
        restart_delay: float = SUPERVISOR_RESTART_DELAY_SECONDS,
        max_restarts: int = SUPERVISOR_MAX_RESTARTS,
    ) -> None:
        self.config = config
        self.http_session = http_session
        self.strategy = strategy or build_strategy(config)
        self.session_factory = session_factory
        self.restart_delay = restart_delay
        self.max_restarts = max_restarts
        self.state = SupervisorState.IDLE
        self.restarts = 0
        self.joins = 0
        self.stop_event = asyncio.Event()
        self.session: ChatSession | None = None
        self.credential: Credential | None = None

    def _set_state(self, new_state: SupervisorState) -> None:
        if self.state != new_state:
            logging.debug(f"🔀 Supervisor state {self.state.name} -> {new_state.name}")
            self.state = new_state

    def request_stop(self) -> None:
        """Ask the supervisor to stop at the next opportunity.

        The active session's transport is closed so a pending read returns.
        """
        if self.stop_event.is_set():
            return
        logging.warning("🔻 Stop requested - shutting down bot")
        self.stop_event.set()
        if self.session is not None:
            self.session.abort()

    async def start(self) -> SessionOutcome:
        """Run until a clean stop or an external stop request.

        Returns:
            CLEAN_STOP after an authorized shutdown command, STOP_REQUESTED
            after ``request_stop()``.

        Raises:
            OAuthError: Authorization failed (fatal).
            TokenExchangeError: Token endpoint rejected the request (fatal).
            TransportError: Restart limit reached.
        """
        owns_session = self.http_session is None
        http_session = self.http_session or aiohttp.ClientSession()
        client = TokenExchangeClient(
            self.config.client_id,
            self.config.client_secret,
            http_session,
            token_url=self.config.token_url,
            validate_url=self.config.validate_url,
        )
        logging.info(
            f"🚀 Starting bot user={self.config.bot_name} channel=#{self.config.channel_name} strategy={self.strategy.name}"
        )
        try:
            return await self._run(client)
        finally:
            self.session = None
            self._set_state(SupervisorState.IDLE)
            if owns_session:
                await http_session.close()

    async def _run(self, client: TokenExchangeClient) -> SessionOutcome:
        credential = await self._fetch_token(client)
        if credential is None:
            return SessionOutcome.STOP_REQUESTED

        while not self.stop_event.is_set():
            try:
                if self.joins > 0 and not await client.validate(credential):
                    logging.info("🔄 Token no longer valid - fetching a new one")
                    credential = await self._fetch_token(client)
                    if credential is None:
                        break
                outcome = await self._run_session(credential)
            except (OAuthError, TokenExchangeError):
                raise
            except Exception as e:  # noqa: BLE001
                if self.stop_event.is_set():
                    break
                if not is_transient(e):
                    log_error("Bot session failed", e)
                    raise
                await self._handle_transient(e)
                continue

            if outcome is SessionOutcome.CLEAN_STOP:
                logging.info("🏁 Bot stopped by channel owner - not restarting")
            return outcome

        return SessionOutcome.STOP_REQUESTED

    async def _fetch_token(self, client: TokenExchangeClient) -> Credential | None:
        self._set_state(SupervisorState.FETCHING_TOKEN)
        try:
            credential = await self.strategy.acquire(client, stop_event=self.stop_event)
        except (OAuthError, TokenExchangeError) as e:
            if self.stop_event.is_set():
                logging.info("🔻 Token acquisition cancelled by stop request")
                return None
            log_error("Failed to obtain access token", e)
            raise
        self.credential = credential
        return credential

    async def _run_session(self, credential: Credential) -> SessionOutcome:
        self._set_state(SupervisorState.CONNECTING)
        session = self.session_factory(self.config, credential, self.stop_event)
        self.session = session
        try:
            await session.connect()
            try:
                await session.join_channel()
            except TransportError:
                await session.disconnect()
                raise
            self.joins += 1
            self._set_state(SupervisorState.RUNNING)
            return await session.read_loop()
        finally:
            if session.lines_received:
                # Traffic received ends the failure streak
                self.restarts = 0
            self.session = None

    async def _handle_transient(self, error: Exception) -> None:
        self.restarts += 1
        log_error(
            "Bot session error",
            error,
            {"restart": self.restarts, "channel": self.config.channel_name},
        )
        if self.max_restarts and self.restarts > self.max_restarts:
            logging.error(f"❌ Giving up after {self.max_restarts} consecutive restarts")
            raise error
        logging.info(f"🔁 Restarting session in {self.restart_delay}s attempt={self.restarts}")
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self.stop_event.wait(), timeout=self.restart_delay)
