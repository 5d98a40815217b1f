"""Runtime configuration for a DirectoryServer.

Resolution order: explicit config dict > env var > default.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from .errors import ConfigError
from .logger import LEVELS
from .notify.notifier_local import DEFAULT_OUTBOX_LIMIT

NOTIFIER_MODES = ("local", "http", "null")


@dataclass(frozen=True)
class ServerConfig:
    notifier: str = "local"
    webhook_url: str = "http://localhost:8080/notify"
    webhook_timeout: float = 5.0
    check_invariants: bool = False
    log_level: str = "INFO"
    outbox_limit: int = DEFAULT_OUTBOX_LIMIT


def _flag(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def load_config(config: dict | None = None) -> ServerConfig:
    config = config or {}
    defaults = ServerConfig()

    def pick(key: str, env_var: str, default):
        if config.get(key) is not None:
            return config[key]
        return os.getenv(env_var, default)

    notifier = str(pick("notifier", "KEYDIR_NOTIFIER", defaults.notifier)).lower()
    if notifier not in NOTIFIER_MODES:
        raise ConfigError(f"Unknown notifier: {notifier}")

    try:
        timeout = float(pick("webhook_timeout", "KEYDIR_WEBHOOK_TIMEOUT", defaults.webhook_timeout))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid webhook timeout: {e}") from e

    log_level = str(pick("log_level", "KEYDIR_LOG_LEVEL", defaults.log_level)).upper()
    if log_level not in LEVELS:
        raise ConfigError(f"Unknown log level: {log_level}")

    try:
        outbox_limit = int(pick("outbox_limit", "KEYDIR_OUTBOX_LIMIT", defaults.outbox_limit))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid outbox limit: {e}") from e
    if outbox_limit < 1:
        raise ConfigError(f"Outbox limit must be positive: {outbox_limit}")

    return ServerConfig(
        notifier=notifier,
        webhook_url=pick("webhook_url", "KEYDIR_WEBHOOK_URL", defaults.webhook_url),
        webhook_timeout=timeout,
        check_invariants=_flag(pick("check_invariants", "KEYDIR_CHECK_INVARIANTS", defaults.check_invariants)),
        log_level=log_level,
        outbox_limit=outbox_limit,
    )
