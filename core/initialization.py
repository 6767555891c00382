"""
core/initialization.py
----------------------
Loads configuration from .env, validates it into a WatchConfig, and wires all
runtime components with simple dependency‑injection (DI) overrides.
"""

from __future__ import annotations

import os
import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from core.signal_handler import ShutdownSignal
from models.watch_config import WatchConfig
from modules.poll_loop import PollLoop
from modules.prober import HttpProber
from notifiers.sound_player import SoundPlayer
from utils.config_validator import ConfigError, validate_config
from utils.logger import setup_logger

# config key -> environment variable
ENV_KEYS: Dict[str, str] = {
    "target_url": "WATCH_URL",
    "interval": "WATCH_INTERVAL",
    "success_status": "WATCH_SUCCESS_STATUS",
    "sound_file": "WATCH_SOUND_FILE",
    "notify_mode": "WATCH_NOTIFY_MODE",
    "request_timeout": "WATCH_REQUEST_TIMEOUT",
    "shutdown_grace": "WATCH_SHUTDOWN_GRACE",
}


def load_configuration(
    env_path: str = "config.env",
    overrides: Optional[Dict[str, Any]] = None,
) -> WatchConfig:
    """
    Load settings from an .env-style file (plus explicit overrides, e.g. CLI
    flags) and return a validated, immutable WatchConfig.
    """
    log = logging.getLogger(__name__)
    load_dotenv(dotenv_path=env_path)

    conf: Dict[str, Any] = {}
    for key, env_name in ENV_KEYS.items():
        val = os.getenv(env_name)
        if val is not None and val.strip() != "":
            conf[key] = val.strip()

    for key, val in (overrides or {}).items():
        if val is not None:
            conf[key] = val

    log.debug("Parsed watcher config: %s", conf)
    validate_config(conf)

    try:
        return WatchConfig(**conf)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def initialize_components(
    config: WatchConfig,
    overrides: Optional[Dict[str, object]] = None,
    logger: Optional[logging.Logger] = None,
) -> Dict[str, object]:
    """
    Construct and wire together all runtime components (supports DI via overrides).

    Keys you can override:
    {"logger", "shutdown", "prober", "player", "poll_loop"}

    Loading the sound happens here, so AudioLoadError / AudioDeviceError
    surface before any probe is sent.
    """
    overrides = overrides or {}

    # 1) Logger
    logger = overrides.get("logger") or logger or setup_logger(__name__)

    # 2) Shutdown signal
    shutdown = overrides.get("shutdown") or ShutdownSignal(logger=logger)

    # 3) Player – fatal if the sound or the device is unusable
    player = overrides.get("player")
    if player is None:
        player = SoundPlayer.load_once(config.sound_file, logger=logger)

    # 4) Prober
    prober = overrides.get("prober") or HttpProber(
        config.target_url, timeout=config.request_timeout, logger=logger
    )

    # 5) Poll loop
    poll_loop = overrides.get("poll_loop") or PollLoop(
        config, prober, player, shutdown, logger=logger
    )

    logger.info("✅ Logger initialized.")
    logger.info("✅ Player initialized: %s", player.__class__.__name__)
    logger.info("✅ Prober initialized: %s", prober.__class__.__name__)
    logger.info("✅ PollLoop initialized.")

    return {
        "logger": logger,
        "shutdown": shutdown,
        "prober": prober,
        "player": player,
        "poll_loop": poll_loop,
    }
