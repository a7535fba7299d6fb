from .signal_handler import SignalHandler
from .supervisor import BotSupervisor, SupervisorState

__all__ = ["BotSupervisor", "SupervisorState", "SignalHandler"]
