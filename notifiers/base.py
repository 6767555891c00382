# notifiers/base.py
"""
notifiers/base.py
-----------------
The interface every audible notifier must implement.
"""
from __future__ import annotations
from abc import ABC, abstractmethod


class BasePlayer(ABC):
    """Every concrete player must implement play() and stop()."""

    @abstractmethod
    async def play(self) -> None:
        """Start the notification and return once it has finished (or was superseded)."""
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        """Silence any playback in progress."""
        raise NotImplementedError
