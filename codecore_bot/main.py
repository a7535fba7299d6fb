#!/usr/bin/env python3
"""
Main entry point for the C0deC0re chat bot
"""

import asyncio
import logging
import sys

from .bot.signal_handler import SignalHandler
from .bot.supervisor import BotSupervisor
from .config import default_config_path, load_config
from .errors.handling import log_error
from .errors.internal import ConfigError
from .logging_config import LoggerConfigurator


async def main(config_path: str | None = None) -> None:
    """Load the configuration and run the bot until it stops.

    Raises:
        SystemExit: If a fatal error occurs (bad config, failed authorization,
            exhausted restarts).
    """
    supervisor: BotSupervisor | None = None
    try:
        logging.info("🚀 Starting C0deC0re chat bot")
        config = load_config(config_path)
        supervisor = BotSupervisor(config)
        signals = SignalHandler(supervisor.request_stop)
        signals.setup_signal_handlers()
        outcome = await supervisor.start()
        logging.info(f"🏁 Bot finished outcome={outcome.name}")
    except asyncio.CancelledError:
        raise
    except Exception as e:
        log_error("Main application error", e)
        sys.exit(1)
    finally:
        logging.info("✅ Application shutdown complete")


def validate_config(config_path: str | None = None) -> int:
    """Load the configuration only; return a process exit code."""
    logging.info("🏥 Validate mode")
    try:
        config = load_config(config_path)
    except ConfigError as e:
        logging.error(f"❌ Configuration invalid: {e}")
        return 1
    logging.info(
        f"✅ Configuration valid - channel=#{config.channel_name} bot={config.bot_name} grant={config.permissions}"
    )
    return 0


def run(argv: list[str] | None = None) -> None:
    """Synchronous entry point for the application.

    Usage: ``main.py [--validate] [CONFIG_FILE]``. Without a file argument the
    path comes from ``CODECORE_CONF_FILE``.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    LoggerConfigurator().configure()

    validate = "--validate" in args
    paths = [a for a in args if not a.startswith("--")]
    config_path = paths[0] if paths else default_config_path()

    if validate:
        sys.exit(validate_config(config_path))

    try:
        asyncio.run(main(config_path))
    except KeyboardInterrupt:
        sys.exit(0)
    except asyncio.CancelledError:
        sys.exit(0)


if __name__ == "__main__":
    run()
