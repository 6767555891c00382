#!/usr/bin/env python3
"""
Slot Watcher - Main Entry Point

Polls one URL at a fixed interval and plays a sound the moment it answers
with the awaited status code. Stop it with Ctrl+C (or SIGTERM).

Usage:
    python main.py --url https://example.org/appointment.do --sound alert.mp3
"""

import argparse
import asyncio
import sys

from core.initialization import initialize_components, load_configuration
from notifiers.sound_player import AudioDeviceError, AudioLoadError
from utils.config_validator import ConfigError
from utils.logger import setup_logger


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch a URL and play a sound when it changes state")
    parser.add_argument("--env", default="config.env", help="Path to the .env settings file")
    parser.add_argument("--url", help="URL to probe (WATCH_URL)")
    parser.add_argument("--interval", help="Poll interval, e.g. 5s or 500ms (WATCH_INTERVAL)")
    parser.add_argument("--status", type=int, help="Status code that counts as success (WATCH_SUCCESS_STATUS)")
    parser.add_argument("--sound", help="Sound file to play on success (WATCH_SOUND_FILE)")
    parser.add_argument("--mode", choices=["background", "blocking"], help="Notify mode (WATCH_NOTIFY_MODE)")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser.parse_args(argv)


async def run_watcher(args: argparse.Namespace) -> str:
    """
    Entrypoint coroutine for the watcher.

    Loads the configuration, loads the sound (fatal on failure), installs the
    SIGINT/SIGTERM handlers and runs the poll loop until one of them fires.
    Returns the shutdown reason.
    """
    config = load_configuration(
        args.env,
        overrides={
            "target_url": args.url,
            "interval": args.interval,
            "success_status": args.status,
            "sound_file": args.sound,
            "notify_mode": args.mode,
        },
    )

    # config.env is loaded by now; setup_logger reads LOG_* (file, rotation) itself
    logger = setup_logger("SlotWatcher", level=args.log_level, to_console=True)

    components = initialize_components(config, logger=logger)
    shutdown = components["shutdown"]
    prober = components["prober"]

    shutdown.install()
    try:
        async with prober:
            return await components["poll_loop"].run()
    finally:
        shutdown.uninstall()


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        reason = asyncio.run(run_watcher(args))
    except ConfigError as e:
        print(f"❌ Invalid configuration: {e}", file=sys.stderr)
        return 1
    except (AudioLoadError, AudioDeviceError) as e:
        print(f"❌ Cannot set up the notification sound: {e}", file=sys.stderr)
        return 1
    print(f"👋 Watcher stopped ({reason})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
