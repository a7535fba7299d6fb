import logging

import pytest

from codecore_bot.auth_token.types import Credential
from codecore_bot.config.model import BotConfig
from tests.fixtures.sample_configs import CLIENT_CREDENTIALS_CONFIG


@pytest.fixture
def bot_config() -> BotConfig:
    """Config for channel 'testchannel' owned by 'owner'."""
    return BotConfig.model_validate(CLIENT_CREDENTIALS_CONFIG)


@pytest.fixture
def credential() -> Credential:
    return Credential(access_token="abc", token_type="bearer", expires_in_seconds=3600)


@pytest.fixture
def restore_root_logging():
    """Put root logger handlers and level back after a test reconfigures logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
