from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass(frozen=True)
class AudioClip:
    """Decoded, in-memory sound. ``frames`` has shape (n_frames, channels) and is read-only."""

    frames: np.ndarray
    samplerate: int
    source: Path | None = None

    def __post_init__(self) -> None:
        if self.frames.ndim != 2:
            raise ValueError("frames must be a 2-D (frames, channels) array")
        if self.samplerate <= 0:
            raise ValueError("samplerate must be positive")
        self.frames.flags.writeable = False

    @property
    def channels(self) -> int:
        return int(self.frames.shape[1])

    @property
    def duration(self) -> float:
        return len(self.frames) / self.samplerate
