"""Load optional project configuration from `.taskchain/config.yaml`."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional

from .constants import (
    CONFIG_FILE,
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    ENV_LOCK_TIMEOUT,
    ENV_LOG_LEVEL,
    STATE_DIR_NAME,
)
from .io_utils import _load_yaml_with_error

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def state_dir_for(project_dir: Path) -> Path:
    return project_dir / STATE_DIR_NAME


def load_config(project_dir: Path) -> tuple[dict[str, Any], str | None]:
    """Load the optional config file.

    Args:
        project_dir: Project root directory.

    Returns:
        A tuple of `(config, error_message)`. If the file is missing, returns `({}, None)`.
    """
    path = state_dir_for(project_dir.resolve()) / CONFIG_FILE
    data, err = _load_yaml_with_error(path, {})
    if err:
        return {}, err
    return data, None


def _get_nested(config: Mapping[str, Any], *keys: str) -> Any:
    cur: Any = config
    for key in keys:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def get_log_level(
    config: Mapping[str, Any],
    env: Optional[Mapping[str, str]] = None,
    override: Optional[str] = None,
) -> str:
    """Resolve the log level.

    An explicit *override* (the CLI flag) wins, then the environment, then
    config, then the default. Unknown level names are skipped.
    """
    env = os.environ if env is None else env
    for raw in (override, env.get(ENV_LOG_LEVEL), config.get("log_level")):
        if isinstance(raw, str) and raw.strip().upper() in VALID_LOG_LEVELS:
            return raw.strip().upper()
    return DEFAULT_LOG_LEVEL


def get_lock_timeout(config: Mapping[str, Any], env: Optional[Mapping[str, str]] = None) -> float:
    """Seconds to wait for the store lock. Non-positive or unparsable values are ignored."""
    env = os.environ if env is None else env
    for raw in (env.get(ENV_LOCK_TIMEOUT), config.get("lock_timeout")):
        if raw is None or isinstance(raw, bool):
            continue
        try:
            value = float(raw)
        except (TypeError, ValueError):
            continue
        if value > 0:
            return value
    return DEFAULT_LOCK_TIMEOUT


def get_server_config(config: Mapping[str, Any]) -> tuple[str, int]:
    """Extract `(host, port)` from the `server` block."""
    host = _get_nested(config, "server", "host")
    port = _get_nested(config, "server", "port")
    if not isinstance(host, str) or not host:
        host = DEFAULT_SERVER_HOST
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        port = DEFAULT_SERVER_PORT
    return host, port
