"""Shared constants for the task store, config, and server."""

STATE_DIR_NAME = ".taskchain"
CONFIG_FILE = "config.yaml"
STORE_FILENAME = "tasks.yaml"
LOCK_FILENAME = "tasks.lock"
STORE_VERSION = 1

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOCK_TIMEOUT = 30.0  # seconds
DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 8000

ENV_LOG_LEVEL = "TASKCHAIN_LOG_LEVEL"
ENV_LOCK_TIMEOUT = "TASKCHAIN_LOCK_TIMEOUT"
