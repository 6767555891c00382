# utils/logger.py
import logging
import os
from logging.handlers import RotatingFileHandler

from utils.config_validator import ConfigError

DEFAULT_LOG_FILE = "logs/watcher.log"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def log_settings() -> dict:
    """
    Current LOG_* settings. Read on every call, so values loaded from
    config.env after import still apply.
    """
    return {
        "level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "log_file": os.getenv("LOG_FILE", DEFAULT_LOG_FILE),  # "" disables the file
        "max_mb": _env_int("LOG_MAX_MB", 5),
        "backups": _env_int("LOG_BACKUPS", 5),
    }


def setup_logger(name: str,
                 level: str | int | None = None,
                 log_file: str | None = None,
                 to_console: bool = True,
                 max_mb: int | None = None,
                 backups: int | None = None) -> logging.Logger:
    """
    Create/get a logger with console and rotating-file handlers.
    Arguments left as None fall back to the LOG_* environment variables.
    Re-using the same name returns the same configured logger (no duplicate handlers).
    """
    logger = logging.getLogger(name)
    if logger.handlers:  # already configured
        return logger

    settings = log_settings()
    level = level if level is not None else settings["level"]
    log_file = log_file if log_file is not None else settings["log_file"]
    max_mb = max_mb if max_mb is not None else settings["max_mb"]
    backups = backups if backups is not None else settings["backups"]

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_mb * 1024 * 1024,
            backupCount=backups,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    if to_console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(level)
        logger.addHandler(stream_handler)

    # per-request access lines drown out the tick events
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return logger
