import logging
import os
from logging.handlers import RotatingFileHandler

import pytest

from core.initialization import ENV_KEYS, load_configuration
from utils.config_validator import ConfigError
from utils.logger import log_settings, setup_logger

LOG_KEYS = ("LOG_LEVEL", "LOG_FILE", "LOG_MAX_MB", "LOG_BACKUPS")


# ------------------------- Fixtures ------------------------- #

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (*ENV_KEYS.values(), *LOG_KEYS):
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight into os.environ
    for name in (*ENV_KEYS.values(), *LOG_KEYS):
        os.environ.pop(name, None)


@pytest.fixture
def logger_name(request):
    name = f"test_logger.{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def write_env(path, **log_settings):
    lines = ["WATCH_URL=http://example.test/", "WATCH_SOUND_FILE=alert.wav"]
    lines += [f"{key}={value}" for key, value in log_settings.items()]
    path.write_text("\n".join(lines) + "\n")
    return path


# ------------------------- Tests ------------------------- #

def test_rotation_settings_come_from_env_file(tmp_path, logger_name):
    log_file = tmp_path / "logs" / "watcher.log"
    env = write_env(tmp_path / "config.env", LOG_FILE=log_file, LOG_MAX_MB=1, LOG_BACKUPS=2)

    load_configuration(str(env))
    logger = setup_logger(logger_name)

    [handler] = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert handler.maxBytes == 1024 * 1024
    assert handler.backupCount == 2
    assert log_file.parent.is_dir()


def test_explicit_arguments_beat_env(tmp_path, logger_name, monkeypatch):
    monkeypatch.setenv("LOG_MAX_MB", "1")
    monkeypatch.setenv("LOG_LEVEL", "ERROR")

    logger = setup_logger(
        logger_name, level="DEBUG", log_file=str(tmp_path / "w.log"), max_mb=3, backups=7
    )

    [handler] = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert handler.maxBytes == 3 * 1024 * 1024
    assert handler.backupCount == 7
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)


def test_level_comes_from_env(logger_name, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("LOG_FILE", "")

    logger = setup_logger(logger_name)

    assert logger.level == logging.WARNING


def test_empty_log_file_disables_file_handler(logger_name, monkeypatch):
    monkeypatch.setenv("LOG_FILE", "")

    logger = setup_logger(logger_name)

    assert len(logger.handlers) == 1
    assert type(logger.handlers[0]) is logging.StreamHandler


def test_second_call_returns_same_logger(tmp_path, logger_name):
    first = setup_logger(logger_name, log_file=str(tmp_path / "w.log"))
    handlers = list(first.handlers)

    second = setup_logger(logger_name, level="DEBUG", log_file=str(tmp_path / "other.log"))

    assert second is first
    assert second.handlers == handlers
    assert not (tmp_path / "other.log").exists()


def test_console_only_when_asked(tmp_path, logger_name):
    logger = setup_logger(logger_name, log_file=str(tmp_path / "w.log"), to_console=False)

    assert [type(h) for h in logger.handlers] == [RotatingFileHandler]


def test_defaults_without_env():
    assert log_settings() == {
        "level": "INFO",
        "log_file": "logs/watcher.log",
        "max_mb": 5,
        "backups": 5,
    }


def test_non_integer_rotation_is_config_error(logger_name, monkeypatch):
    monkeypatch.setenv("LOG_MAX_MB", "lots")

    with pytest.raises(ConfigError, match="LOG_MAX_MB"):
        setup_logger(logger_name)
