"""Bot command dispatch."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors.internal import TransportError
from .models import ChannelMessage, CommandOutcome

if TYPE_CHECKING:  # pragma: no cover
    from .session import ChatSession

CommandHandler = Callable[["ChatSession", str | None], Awaitable[CommandOutcome]]

GENPROMPT_PLACEHOLDER = "I would be generating a prompt right now"


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """A chat command the bot answers to.

    Privileged commands are honored only when sent by the channel owner.
    """

    name: str
    handler: CommandHandler
    privileged: bool = False


async def shutdown_command(session: ChatSession, _argument: str | None) -> CommandOutcome:
    logging.warning(
        f"🛑 Shutdown command received - shutting down channel={session.channel}"
    )
    await session.disconnect()
    return CommandOutcome.STOP


async def genprompt_command(session: ChatSession, _argument: str | None) -> CommandOutcome:
    await session.speak(GENPROMPT_PLACEHOLDER)
    return CommandOutcome.CONTINUE


DEFAULT_COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec("tbdown", shutdown_command, privileged=True),
    CommandSpec("genprompt", genprompt_command),
)


class CommandDispatcher:
    """Maps ``!command`` names to handlers and enforces the owner check.

    Sender comparison is exact and case-sensitive. Unknown commands and
    unauthorized attempts are logged and ignored.
    """

    def __init__(self, owner: str, commands: Iterable[CommandSpec] = DEFAULT_COMMANDS):
        self.owner = owner
        self._commands = {spec.name: spec for spec in commands}

    @property
    def command_names(self) -> list[str]:
        return sorted(self._commands)

    def register(self, spec: CommandSpec) -> None:
        self._commands[spec.name] = spec

    def is_authorized(self, spec: CommandSpec, sender: str) -> bool:
        return not spec.privileged or sender == self.owner

    async def dispatch(self, event: ChannelMessage, session: ChatSession) -> CommandOutcome:
        command = event.command
        if command is None:
            return CommandOutcome.CONTINUE

        spec = self._commands.get(command.name)
        if spec is None:
            logging.debug(
                f"❔ Ignoring unknown command command={command.name} sender={event.sender}"
            )
            return CommandOutcome.CONTINUE

        if not self.is_authorized(spec, event.sender):
            logging.warning(
                f"🚫 Unauthorized command ignored command={command.name} sender={event.sender} owner={self.owner}"
            )
            return CommandOutcome.CONTINUE

        logging.info(
            f"⚙️ Running command command={command.name} sender={event.sender} argument={command.argument}"
        )
        try:
            return await spec.handler(session, command.argument)
        except TransportError:
            raise
        except Exception as e:  # noqa: BLE001
            logging.error(
                f"💥 Command handler failed command={command.name} error={type(e).__name__}: {e}"
            )
            return CommandOutcome.CONTINUE
