"""
prober.py
---------
Issues one GET against the watched URL per call and reports the status
code, or the transport error that stopped it, as a ProbeOutcome.
"""

from __future__ import annotations

import asyncio
import statistics
import time
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Optional

import aiohttp

from core.signal_handler import ShutdownSignal
from models.probe_outcome import ProbeCancelled, ProbeOutcome


class BaseProber(ABC):
    """Every concrete prober must implement probe()."""

    @abstractmethod
    async def probe(self, cancellation: Optional[ShutdownSignal] = None) -> ProbeOutcome:
        """Check the target once. Never raises for network trouble."""
        raise NotImplementedError

    async def __aenter__(self) -> BaseProber:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Release any held resources."""

    def log_metrics(self) -> None:
        """Log a usage summary, if the prober keeps one."""


# ------------------------------ http prober -------------------------------- #
class HttpProber(BaseProber):
    """aiohttp-based prober. One shared session, no retries."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        logger: Optional[logging.Logger] = None,
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        self._session = session
        self._owns_session = session is None

        # metrics
        self.metrics = {
            "requests_sent": 0,
            "errors": 0,
            "latencies": deque(maxlen=100),
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    # -------------------------------------------------------------------- #
    async def probe(self, cancellation: Optional[ShutdownSignal] = None) -> ProbeOutcome:
        if cancellation is not None and cancellation.is_set():
            return ProbeOutcome.from_error(ProbeCancelled(f"shutdown requested ({cancellation.reason})"))

        session = self._get_session()
        t0 = time.monotonic()
        try:
            async with session.get(self.url, timeout=self.timeout) as resp:
                self.metrics["requests_sent"] += 1
                status = resp.status
        except asyncio.TimeoutError as exc:
            self.metrics["errors"] += 1
            # aiohttp's ServerTimeoutError has no message of its own
            return ProbeOutcome.from_error(
                exc if str(exc) else asyncio.TimeoutError(f"no response within {self.timeout.total}s"),
                elapsed=time.monotonic() - t0,
            )
        except aiohttp.ClientError as exc:
            self.metrics["errors"] += 1
            return ProbeOutcome.from_error(exc, elapsed=time.monotonic() - t0)

        elapsed = time.monotonic() - t0
        self.metrics["latencies"].append(elapsed)
        self.logger.debug("GET %s -> %s in %.3fs", self.url, status, elapsed)
        return ProbeOutcome.from_status(status, elapsed=elapsed)

    def log_metrics(self) -> None:
        latencies = self.metrics["latencies"]
        avg = statistics.mean(latencies) if latencies else 0
        self.logger.info(
            "📊 Requests: %s | Errors: %s | Avg latency: %.3fs",
            self.metrics["requests_sent"],
            self.metrics["errors"],
            avg,
        )
