"""Tests for config loading and logging setup."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from taskchain.config import get_lock_timeout, get_log_level, get_server_config, load_config
from taskchain.constants import DEFAULT_LOCK_TIMEOUT, DEFAULT_SERVER_HOST, DEFAULT_SERVER_PORT
from taskchain.logging_utils import configure_logging


def _write_config(project_dir: Path, text: str) -> None:
    state = project_dir / ".taskchain"
    state.mkdir(exist_ok=True)
    (state / "config.yaml").write_text(text, encoding="utf-8")


def test_missing_config_is_empty(tmp_path: Path) -> None:
    assert load_config(tmp_path) == ({}, None)


def test_load_config(tmp_path: Path) -> None:
    _write_config(tmp_path, "log_level: debug\nlock_timeout: 5\nserver:\n  host: 0.0.0.0\n  port: 9000\n")
    config, err = load_config(tmp_path)
    assert err is None
    assert get_log_level(config, env={}) == "DEBUG"
    assert get_lock_timeout(config, env={}) == 5.0
    assert get_server_config(config) == ("0.0.0.0", 9000)


def test_unreadable_config_reports_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "- just\n- a list\n")
    config, err = load_config(tmp_path)
    assert config == {}
    assert err is not None and "expected mapping" in err


def test_env_overrides_config() -> None:
    config = {"log_level": "DEBUG", "lock_timeout": 5}
    env = {"TASKCHAIN_LOG_LEVEL": "warning", "TASKCHAIN_LOCK_TIMEOUT": "1.5"}
    assert get_log_level(config, env=env) == "WARNING"
    assert get_lock_timeout(config, env=env) == 1.5


def test_invalid_values_fall_back() -> None:
    config = {"log_level": "LOUD", "lock_timeout": -2, "server": {"host": "", "port": 70000}}
    assert get_log_level(config, env={"TASKCHAIN_LOG_LEVEL": "nope"}) == "INFO"
    assert get_lock_timeout(config, env={"TASKCHAIN_LOCK_TIMEOUT": "abc"}) == DEFAULT_LOCK_TIMEOUT
    assert get_server_config(config) == (DEFAULT_SERVER_HOST, DEFAULT_SERVER_PORT)


def test_configure_logging_sets_level(capsys) -> None:
    configure_logging("warning")
    logger.info("hidden")
    logger.warning("shown")
    err = capsys.readouterr().err
    assert "shown" in err
    assert "hidden" not in err


def test_explicit_level_beats_env() -> None:
    env = {"TASKCHAIN_LOG_LEVEL": "ERROR"}
    assert get_log_level({"log_level": "WARNING"}, env=env, override="debug") == "DEBUG"
    assert get_log_level({}, env=env, override="shout") == "ERROR"
