"""Chat line parsing.

Turns one raw protocol line into a ``ParsedEvent``. Parsing is pure: no I/O,
no logging, and malformed input yields ``Unrecognized`` instead of raising.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..constants import IRC_PING_LINE
from .models import BotCommand, ChannelMessage, ParsedEvent, Ping, Unrecognized

# :<sender>!<ident>@<host> PRIVMSG #<channel>[ :<body>]
PRIVMSG_PATTERN = r"^:(\w+)!\w+@[\w.\-]+ PRIVMSG #(\w+)(?: :(.*))?$"
# !<command>[ <argument>]
COMMAND_PATTERN = r"^!(\w+)(?:\s+(\w+))?"


@dataclass(frozen=True)
class LineParser:
    """Immutable parser configuration, built once per bot run.

    The channel segment of a PRIVMSG is captured but not checked against the
    configured channel; callers that care compare it themselves.
    """

    ping_line: str = IRC_PING_LINE
    privmsg_pattern: str = PRIVMSG_PATTERN
    command_pattern: str = COMMAND_PATTERN
    _privmsg_re: re.Pattern[str] = field(init=False, repr=False, compare=False)
    _command_re: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_privmsg_re", re.compile(self.privmsg_pattern))
        object.__setattr__(self, "_command_re", re.compile(self.command_pattern))

    def parse(self, line: str) -> ParsedEvent:
        line = line.rstrip("\r\n")
        if line == self.ping_line:
            return Ping(raw=line)
        match = self._privmsg_re.match(line)
        if match is None:
            return Unrecognized(raw=line)
        sender, channel, body = match.group(1), match.group(2), match.group(3) or ""
        return ChannelMessage(
            sender=sender,
            channel=channel,
            body=body,
            command=self.parse_command(body),
        )

    def parse_command(self, body: str) -> BotCommand | None:
        if not body:
            return None
        match = self._command_re.match(body)
        if match is None:
            return None
        return BotCommand(name=match.group(1), argument=match.group(2))


_default_parser = LineParser()


def parse_line(line: str) -> ParsedEvent:
    """Parse with the default Twitch configuration."""
    return _default_parser.parse(line)
