"""Chat connection session: dial, handshake, read loop and outbound path."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from ..constants import (
    IRC_CONNECT_BACKOFF_BASE_SECONDS,
    IRC_CONNECT_BACKOFF_MAX_SECONDS,
    IRC_CONNECT_MAX_ATTEMPTS,
    IRC_CONNECT_TIMEOUT_SECONDS,
    IRC_PONG_REPLY,
)
from ..errors.internal import EmptyMessageError, TransportError
from ..rate.rate_limiter import OutboundRateLimiter
from ..utils.helpers import format_duration
from ..utils.retry import RetryExhaustedError, retry_async
from .dispatcher import CommandDispatcher
from .models import (
    ChannelMessage,
    CommandOutcome,
    ConnectionState,
    Ping,
    SessionOutcome,
)
from .parser import LineParser

if TYPE_CHECKING:  # pragma: no cover
    from ..auth_token.types import Credential
    from ..config.model import BotConfig


class ChatSession:  # pylint: disable=too-many-instance-attributes
    """One connection to the chat server for one channel.

    The session owns its transport exclusively: every outbound line goes
    through ``_send_line`` (serialized by a lock) and chat messages go
    through ``speak`` which additionally waits on the outbound token bucket.
    The read loop itself is never throttled.
    """

    def __init__(
        self,
        config: BotConfig,
        credential: Credential,
        *,
        dispatcher: CommandDispatcher | None = None,
        parser: LineParser | None = None,
        rate_limiter: OutboundRateLimiter | None = None,
        stop_event: asyncio.Event | None = None,
        connect_attempts: int = IRC_CONNECT_MAX_ATTEMPTS,
        backoff_base: float = IRC_CONNECT_BACKOFF_BASE_SECONDS,
        backoff_max: float = IRC_CONNECT_BACKOFF_MAX_SECONDS,
        connect_timeout: float = IRC_CONNECT_TIMEOUT_SECONDS,
    ) -> None:
        self.server = config.server_addr
        self.port = config.port
        self.channel = config.channel_name
        self.bot_name = config.bot_name
        self.credential = credential
        self.parser = parser or LineParser()
        self.dispatcher = dispatcher or CommandDispatcher(config.channel_owner or config.channel_name)
        self.rate_limiter = rate_limiter or OutboundRateLimiter(config.message_interval)
        self.stop_event = stop_event or asyncio.Event()
        self.connect_attempts = connect_attempts
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.connect_timeout = connect_timeout
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None
        self.state = ConnectionState.DISCONNECTED
        self.start_time: float | None = None
        self.lines_received = 0
        self._write_lock = asyncio.Lock()
        self._closed = True

    def _set_state(self, new_state: ConnectionState) -> None:
        if self.state != new_state:
            logging.debug(
                f"🔀 Session state {self.state.name} -> {new_state.name} channel={self.channel}"
            )
            self.state = new_state

    @property
    def uptime(self) -> float:
        if self.start_time is None:
            return 0.0
        return time.monotonic() - self.start_time

    async def connect(self) -> None:
        """Open the transport, retrying with bounded exponential backoff.

        Raises:
            TransportError: If every attempt failed or a stop was requested.
        """
        self._set_state(ConnectionState.CONNECTING)
        logging.info(f"🔌 Connecting to {self.server}:{self.port}")

        async def _dial(_attempt: int) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
            return await asyncio.wait_for(
                asyncio.open_connection(self.server, self.port),
                timeout=self.connect_timeout,
            )

        try:
            self.reader, self.writer = await retry_async(
                _dial,
                context=f"connect {self.server}:{self.port}",
                max_attempts=self.connect_attempts,
                base_delay=self.backoff_base,
                max_delay=self.backoff_max,
                stop_event=self.stop_event,
            )
        except RetryExhaustedError as e:
            self._set_state(ConnectionState.DISCONNECTED)
            raise TransportError(
                f"Failed to connect to {self.server}:{self.port} after {e.attempts} attempt(s)",
                data={"server": self.server, "port": self.port, "attempts": e.attempts},
            ) from e

        self._closed = False
        self.start_time = time.monotonic()
        self._set_state(ConnectionState.CONNECTED)
        logging.info(f"✅ Connected to {self.server}:{self.port}")

    async def join_channel(self) -> None:
        """Send the PASS / NICK / JOIN handshake without waiting for acknowledgement."""
        logging.info(f"🚪 Joining #{self.channel} as {self.bot_name}")
        await self._send_line(f"PASS {self.credential.irc_password}", log_as="PASS ***")
        await self._send_line(f"NICK {self.bot_name}")
        await self._send_line(f"JOIN #{self.channel}")
        logging.info(f"👋 Joined #{self.channel} as @{self.bot_name}")

    async def _send_line(self, line: str, *, log_as: str | None = None) -> None:
        writer = self.writer
        if writer is None or writer.is_closing():
            raise TransportError("Cannot write, not connected", data={"channel": self.channel})
        async with self._write_lock:
            try:
                writer.write(f"{line}\r\n".encode())
                await writer.drain()
            except (OSError, ConnectionError) as e:
                raise TransportError(f"Write failed: {e}") from e
        logging.debug(f"📤 {log_as or line}")

    async def speak(self, message: str) -> None:
        """Send one chat message to the channel, honoring the outbound rate limit.

        Raises:
            EmptyMessageError: If ``message`` is empty; nothing is written.
            TransportError: If the write fails.
        """
        if not message:
            raise EmptyMessageError()
        await self.rate_limiter.acquire()
        await self._send_line(f"PRIVMSG #{self.channel} {message}")
        logging.info(f"🗣️ #{self.channel} {self.bot_name}: {message}")

    async def handle_line(self, line: str) -> CommandOutcome:
        """Route one inbound line: keep-alive reply, command dispatch, or ignore."""
        # Every inbound line is logged (timestamped by the formatter)
        logging.info(f"📥 {line}")
        event = self.parser.parse(line)
        if isinstance(event, Ping):
            await self._send_line(IRC_PONG_REPLY)
            return CommandOutcome.CONTINUE
        if isinstance(event, ChannelMessage):
            return await self.dispatcher.dispatch(event, self)
        return CommandOutcome.CONTINUE

    async def read_loop(self) -> SessionOutcome:
        """Read and handle lines until shutdown, stop request, or failure.

        Returns:
            CLEAN_STOP after an authorized shutdown command, STOP_REQUESTED
            after an external stop signal.

        Raises:
            TransportError: On read failure or unexpected end of stream; the
                session is disconnected before raising.
        """
        reader = self.reader
        if reader is None:
            raise TransportError("Cannot read, not connected", data={"channel": self.channel})
        self._set_state(ConnectionState.READING)
        logging.info(f"👀 Watching #{self.channel}")

        while True:
            if self.stop_event.is_set():
                await self.disconnect()
                return SessionOutcome.STOP_REQUESTED
            try:
                raw = await reader.readline()
            except (OSError, ConnectionError, ValueError) as e:
                await self.disconnect()
                if self.stop_event.is_set():
                    return SessionOutcome.STOP_REQUESTED
                raise TransportError(f"Failed to read the channel: {e}") from e
            if not raw:
                await self.disconnect()
                if self.stop_event.is_set():
                    return SessionOutcome.STOP_REQUESTED
                raise TransportError("Connection closed by server", data={"channel": self.channel})

            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            if not line:
                continue
            self.lines_received += 1
            try:
                outcome = await self.handle_line(line)
            except TransportError:
                await self.disconnect()
                raise
            if outcome is CommandOutcome.STOP:
                await self.disconnect()
                return SessionOutcome.CLEAN_STOP

    async def run(self) -> SessionOutcome:
        """Connect, join and read until the session ends."""
        await self.connect()
        try:
            await self.join_channel()
        except TransportError:
            await self.disconnect()
            raise
        return await self.read_loop()

    def abort(self) -> None:
        """Close the transport from outside the read loop so a pending read returns."""
        if self.writer is not None and not self.writer.is_closing():
            self.writer.close()

    async def disconnect(self) -> None:
        """Close the transport and log uptime. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        writer = self.writer
        self.writer = None
        self.reader = None
        if writer is not None:
            try:
                writer.close()
                await writer.wait_closed()
            except (OSError, ConnectionError) as e:
                logging.debug(f"🔌 Error while closing transport: {type(e).__name__} {e}")
        self._set_state(ConnectionState.DISCONNECTED)
        logging.info(
            f"🔌 Closed connection to {self.server}! Live for {format_duration(self.uptime)}"
        )
