"""Configuration package exports."""

from .loader import default_config_path, load_config
from .model import AUTHORIZATION_CODE_GRANT, CLIENT_CREDENTIALS_GRANT, BotConfig

__all__ = [
    "BotConfig",
    "load_config",
    "default_config_path",
    "AUTHORIZATION_CODE_GRANT",
    "CLIENT_CREDENTIALS_GRANT",
]
