"""
core/signal_handler.py
----------------------
Process-wide shutdown signal. OS signals (Ctrl-C / SIGINT, and SIGTERM,
the default for docker and kubernetes) set it exactly once; the poll loop
awaits it alongside its timer.
"""
from __future__ import annotations

import asyncio
import logging
import signal
import threading
from typing import Iterable, Optional

# SIGKILL / SIGSTOP cannot be caught
DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownSignal:
    """Set-once cancellation flag. The first request wins, later ones are no-ops."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._event = asyncio.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._installed: list[signal.Signals] = []
        self._previous: dict[signal.Signals, object] = {}

    # ------------------------------------------------------------------ #
    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def is_set(self) -> bool:
        return self._reason is not None

    def request(self, reason: str = "requested") -> bool:
        """Set the signal. Returns False if it was already set. Must run on the event loop thread."""
        with self._lock:
            if self._reason is not None:
                return False
            self._reason = reason
        self._event.set()
        return True

    async def wait(self) -> str:
        await self._event.wait()
        return self._reason

    async def wait_for(self, timeout: float) -> bool:
        """Wait up to *timeout* seconds. True if shutdown was requested meanwhile."""
        if self.is_set():
            return True
        if timeout <= 0:
            return False
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    # ------------------------------------------------------------------ #
    # OS plumbing
    # ------------------------------------------------------------------ #
    def install(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
    ) -> None:
        """Route the given OS signals into this shutdown signal."""
        self._loop = loop or asyncio.get_running_loop()
        for sig in signals:
            try:
                self._loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError):
                # Windows event loops have no add_signal_handler
                self._previous[sig] = signal.signal(sig, self._on_os_signal)
            self._installed.append(sig)

    def uninstall(self) -> None:
        for sig in self._installed:
            if sig in self._previous:
                signal.signal(sig, self._previous.pop(sig))
            elif self._loop is not None:
                self._loop.remove_signal_handler(sig)
        self._installed.clear()

    def _on_os_signal(self, signum, frame) -> None:
        # plain signal.signal handler: hop back onto the event loop
        self._loop.call_soon_threadsafe(self._on_signal, signum)

    def _on_signal(self, signum) -> None:
        name = signal.Signals(signum).name
        if self.request(name):
            self.logger.info("Caught signal %s – shutting down", name)
        else:
            self.logger.debug("Ignoring %s, shutdown already requested (%s)", name, self._reason)
