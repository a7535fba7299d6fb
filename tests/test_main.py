import json

import pytest

from codecore_bot.main import main, run, validate_config
from tests.fixtures.sample_configs import CLIENT_CREDENTIALS_CONFIG, ZERO_RATE_CONFIG


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "bot.json"
    path.write_text(json.dumps(CLIENT_CREDENTIALS_CONFIG), encoding="utf-8")
    return path


def test_validate_config_ok(config_file):
    assert validate_config(str(config_file)) == 0


def test_validate_config_invalid(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(ZERO_RATE_CONFIG), encoding="utf-8")
    assert validate_config(str(path)) == 1
    assert validate_config(str(tmp_path / "missing.json")) == 1


def test_run_validate_flag_exits_zero(config_file, restore_root_logging):
    with pytest.raises(SystemExit) as exc_info:
        run(["--validate", str(config_file)])
    assert exc_info.value.code == 0


@pytest.mark.asyncio()
async def test_main_exits_one_on_config_error(tmp_path, caplog):
    with pytest.raises(SystemExit) as exc_info:
        await main(str(tmp_path / "missing.json"))
    assert exc_info.value.code == 1
    assert "[CONFIG]" in caplog.text
