class ConfigError(ValueError):
    """Raised when the watcher configuration is missing or invalid."""


def validate_config(config: dict):
    required_keys = [
        "target_url",
        "sound_file",
    ]

    missing = [k for k in required_keys if k not in config or not config[k]]
    if missing:
        raise ConfigError(f"Missing required configuration keys: {missing}")

    if not isinstance(config["target_url"], str):
        raise ConfigError("target_url must be a string.")

    mode = config.get("notify_mode")
    if mode is not None and mode not in ("background", "blocking"):
        raise ConfigError("notify_mode must be 'background' or 'blocking'.")
