"""IRC subsystem package.

Line parsing, command dispatch and the connection session for the chat
server.
"""

from .dispatcher import DEFAULT_COMMANDS, CommandDispatcher, CommandSpec  # noqa: F401
from .models import (  # noqa: F401
    BotCommand,
    ChannelMessage,
    CommandOutcome,
    ConnectionState,
    ParsedEvent,
    Ping,
    SessionOutcome,
    Unrecognized,
)
from .parser import LineParser, parse_line  # noqa: F401
from .session import ChatSession  # noqa: F401

__all__ = [
    "BotCommand",
    "ChannelMessage",
    "ChatSession",
    "CommandDispatcher",
    "CommandOutcome",
    "CommandSpec",
    "ConnectionState",
    "DEFAULT_COMMANDS",
    "LineParser",
    "ParsedEvent",
    "Ping",
    "SessionOutcome",
    "Unrecognized",
    "parse_line",
]
