import logging
import pytest
from keydir_core.config import ServerConfig, load_config
from keydir_core.errors import ConfigError
from keydir_core.logger import get_logger


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("KEYDIR_NOTIFIER", "KEYDIR_WEBHOOK_URL", "KEYDIR_WEBHOOK_TIMEOUT",
                "KEYDIR_CHECK_INVARIANTS", "KEYDIR_LOG_LEVEL", "KEYDIR_OUTBOX_LIMIT"):
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    assert load_config() == ServerConfig()


def test_env_overrides_default(monkeypatch):
    monkeypatch.setenv("KEYDIR_NOTIFIER", "HTTP")
    monkeypatch.setenv("KEYDIR_WEBHOOK_TIMEOUT", "1.5")
    monkeypatch.setenv("KEYDIR_CHECK_INVARIANTS", "true")

    cfg = load_config()
    assert cfg.notifier == "http"
    assert cfg.webhook_timeout == 1.5
    assert cfg.check_invariants is True


def test_dict_overrides_env(monkeypatch):
    monkeypatch.setenv("KEYDIR_NOTIFIER", "http")
    cfg = load_config({"notifier": "null", "log_level": "debug"})
    assert cfg.notifier == "null"
    assert cfg.log_level == "DEBUG"


def test_invalid_values():
    with pytest.raises(ConfigError):
        load_config({"notifier": "pigeon"})
    with pytest.raises(ConfigError):
        load_config({"webhook_timeout": "soon"})


def test_outbox_limit_from_env(monkeypatch):
    monkeypatch.setenv("KEYDIR_OUTBOX_LIMIT", "25")
    assert load_config().outbox_limit == 25

    with pytest.raises(ConfigError):
        load_config({"outbox_limit": 0})
    with pytest.raises(ConfigError):
        load_config({"outbox_limit": "lots"})


def test_unknown_log_level_is_config_error(monkeypatch):
    with pytest.raises(ConfigError):
        load_config({"log_level": "chatty"})

    monkeypatch.setenv("KEYDIR_LOG_LEVEL", "chatty")
    with pytest.raises(ConfigError):
        load_config()


def test_unknown_env_log_level_does_not_break_loggers(monkeypatch):
    monkeypatch.setenv("KEYDIR_LOG_LEVEL", "chatty")
    logger = get_logger("KeyDir.Test.BadLevel")
    assert logger.level == logging.INFO
