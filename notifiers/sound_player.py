# notifiers/sound_player.py
"""
Audible notifier. The sound file is decoded once into memory at start-up
and replayed from that buffer on every match.

Overlap policy: restart-from-zero. A play() issued while the clip is still
sounding cuts the previous playback and starts again from the first frame;
the superseded play() call returns at that moment.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import numpy as np
import soundfile as sf

from models.audio_clip import AudioClip
from notifiers.base import BasePlayer


class AudioLoadError(RuntimeError):
    """The sound file is missing, empty or cannot be decoded."""


class AudioDeviceError(RuntimeError):
    """No usable audio output device (or PortAudio itself is missing)."""


def _output_backend():
    # sounddevice loads the PortAudio shared library at import time
    try:
        import sounddevice
    except OSError as exc:
        raise AudioDeviceError(f"PortAudio library not available: {exc}") from exc
    return sounddevice


def load_clip(path: str | Path) -> AudioClip:
    """Decode *path* fully into a read-only float32 buffer."""
    path = Path(path)
    if not path.is_file():
        raise AudioLoadError(f"sound file not found: {path}")
    try:
        frames, samplerate = sf.read(str(path), dtype="float32", always_2d=True)
    except (sf.SoundFileError, RuntimeError, TypeError) as exc:
        raise AudioLoadError(f"cannot decode {path}: {exc}") from exc
    if len(frames) == 0:
        raise AudioLoadError(f"sound file is empty: {path}")
    return AudioClip(frames=np.ascontiguousarray(frames), samplerate=int(samplerate), source=path)


class SoundPlayer(BasePlayer):
    def __init__(self, clip: AudioClip, backend, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.clip = clip
        self.backend = backend
        self.plays = 0
        self._current: Optional[int] = None  # play number currently sounding

    @classmethod
    def load_once(
        cls,
        path: str | Path,
        logger: Optional[logging.Logger] = None,
        *,
        backend=None,
    ) -> SoundPlayer:
        """Decode the clip and make sure the output device accepts its format. Raises on failure."""
        clip = load_clip(path)
        backend = backend if backend is not None else _output_backend()
        try:
            backend.check_output_settings(
                samplerate=clip.samplerate, channels=clip.channels, dtype="float32"
            )
        except (backend.PortAudioError, ValueError) as exc:
            raise AudioDeviceError(
                f"no output device for {clip.channels}ch/{clip.samplerate}Hz: {exc}"
            ) from exc

        player = cls(clip, backend, logger)
        player.logger.info(
            "🔊 Loaded %s (%.1fs, %sch, %sHz)", path, clip.duration, clip.channels, clip.samplerate
        )
        return player

    @property
    def is_playing(self) -> bool:
        return self._current is not None

    async def play(self) -> None:
        if self._current is not None:
            self.logger.debug("Restarting notification from the beginning")
            self.backend.stop()

        self.plays += 1
        number = self.plays
        self._current = number
        self.backend.play(self.clip.frames, self.clip.samplerate)
        try:
            # returns early if a newer play() or stop() ends this stream
            await asyncio.to_thread(self.backend.wait)
        finally:
            if self._current == number:
                self._current = None

    def stop(self) -> None:
        if self._current is not None:
            self.backend.stop()
            self._current = None
