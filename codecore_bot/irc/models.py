"""Shared IRC data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    READING = auto()


class SessionOutcome(Enum):
    """How a read loop ended without raising."""

    CLEAN_STOP = auto()  # authorized shutdown command
    STOP_REQUESTED = auto()  # external stop signal


class CommandOutcome(Enum):
    CONTINUE = auto()
    STOP = auto()


@dataclass(frozen=True, slots=True)
class BotCommand:
    name: str
    argument: str | None = None


@dataclass(frozen=True, slots=True)
class Ping:
    raw: str


@dataclass(frozen=True, slots=True)
class ChannelMessage:
    sender: str
    channel: str
    body: str
    command: BotCommand | None = None


@dataclass(frozen=True, slots=True)
class Unrecognized:
    raw: str


ParsedEvent = Ping | ChannelMessage | Unrecognized
