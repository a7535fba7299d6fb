from __future__ import annotations

import json

import pytest

from codecore_bot.config import BotConfig, default_config_path, load_config
from codecore_bot.config.loader import CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE
from codecore_bot.constants import IRC_DEFAULT_PORT, IRC_DEFAULT_SERVER
from codecore_bot.errors.internal import ConfigError
from tests.fixtures.sample_configs import (
    AUTH_CODE_CONFIG,
    CLIENT_CREDENTIALS_CONFIG,
    MISSING_CLIENT_ID_CONFIG,
    ZERO_RATE_CONFIG,
)


def _write(tmp_path, data, name="bot.json"):
    path = tmp_path / name
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


def test_load_client_credentials_config(tmp_path):
    config = load_config(_write(tmp_path, CLIENT_CREDENTIALS_CONFIG))
    assert config.client_id == "abcdefghij1234567890"
    assert config.client_secret == "klmnopqrst0987654321"
    assert config.token_url == "https://id.example.test/oauth2/token"
    assert config.channel_name == "testchannel"
    assert config.channel_owner == "owner"
    assert config.message_interval == 0.01
    assert config.server_addr == IRC_DEFAULT_SERVER
    assert config.port == IRC_DEFAULT_PORT
    assert not config.uses_authorization_code


def test_load_authorization_code_config(tmp_path):
    config = load_config(_write(tmp_path, AUTH_CODE_CONFIG))
    assert config.uses_authorization_code
    assert config.listen_url == "localhost"
    assert config.listen_port == 3000
    # Channel normalised and used as the owner when none is given
    assert config.channel_name == "testchannel"
    assert config.channel_owner == "testchannel"


def test_python_field_names_are_accepted():
    config = BotConfig(client_id="cid", channel_name="chan", bot_name="bot")
    assert config.permissions == "client_credentials"
    assert config.listen_port == 3000


def test_blank_permissions_fall_back_to_client_credentials():
    config = BotConfig.model_validate({**CLIENT_CREDENTIALS_CONFIG, "Permissions": "  "})
    assert config.permissions == "client_credentials"


def test_redacted_masks_secret():
    config = BotConfig.model_validate(CLIENT_CREDENTIALS_CONFIG)
    assert config.redacted()["client_secret"] == "***"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError) as exc_info:
        load_config(tmp_path / "nope.json")
    assert "not found" in str(exc_info.value)


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_malformed_file(tmp_path, content):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, content))


@pytest.mark.parametrize("data", [MISSING_CLIENT_ID_CONFIG, ZERO_RATE_CONFIG])
def test_invalid_values(tmp_path, data):
    with pytest.raises(ConfigError) as exc_info:
        load_config(_write(tmp_path, data))
    assert exc_info.value.data["errors"] >= 1


def test_invalid_channel(tmp_path):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, {**CLIENT_CREDENTIALS_CONFIG, "ChannelName": "#"}))


def test_path_from_environment(tmp_path, monkeypatch):
    path = _write(tmp_path, CLIENT_CREDENTIALS_CONFIG, name="env.json")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert default_config_path() == str(path)
    assert load_config().bot_name == "codecorebot"


def test_default_path(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    assert default_config_path() == DEFAULT_CONFIG_FILE
