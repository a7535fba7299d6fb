"""SignalHandler - turns SIGINT/SIGTERM into a supervisor stop request."""

import asyncio
import logging
import signal
from collections.abc import Callable


class SignalHandler:
    """Handler for system signals and shutdown coordination."""

    def __init__(self, on_stop: Callable[[], None]) -> None:
        """Initialize the SignalHandler.

        Args:
            on_stop: Called once when shutdown is initiated.
        """
        self.on_stop = on_stop
        self.shutdown_initiated = False

    def stop(self) -> None:
        """Initiate shutdown. Only the first call has an effect."""
        if self.shutdown_initiated:
            return
        self.shutdown_initiated = True
        self.on_stop()

    def handle(self, signum: int, _frame: object | None = None) -> None:
        logging.warning(f"🛑 Signal received - initiating shutdown (signal={signum})")
        self.stop()

    def setup_signal_handlers(self) -> None:  # pragma: no cover
        """Set up signal handlers for graceful shutdown on SIGINT/SIGTERM."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                if loop is None:
                    raise NotImplementedError
                loop.add_signal_handler(sig, self.handle, sig)
            except NotImplementedError:
                # No loop integration (e.g. Windows); plain handler
                signal.signal(sig, self.handle)
