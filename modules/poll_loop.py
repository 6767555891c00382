"""
poll_loop.py
------------
The watcher's scheduler: on every tick it probes the target, evaluates the
outcome, and plays the notification on a match. Runs until the shutdown
signal is set.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import threading
from typing import Optional, Set, Tuple

from core.signal_handler import ShutdownSignal
from models.probe_outcome import ProbeOutcome
from models.watch_config import WatchConfig
from modules.prober import BaseProber
from modules.success_policy import SuccessPolicy
from notifiers.base import BasePlayer


class LoopState(str, enum.Enum):
    WAITING = "waiting"
    PROBING = "probing"
    DECIDING = "deciding"
    NOTIFYING = "notifying"
    SHUT_DOWN = "shut_down"


class AttemptCounter:
    """Monotonic attempt number. Written by the loop, readable from anywhere."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value


def next_deadline(deadline: float, interval: float, now: float) -> Tuple[float, int]:
    """
    Advance a tick deadline by one interval, skipping ticks that already passed.

    Returns the new deadline and the number of dropped ticks. When work overran,
    the returned deadline is the latest missed tick (<= now), so exactly one
    coalesced tick fires straight away and the schedule stays aligned to start.
    """
    deadline += interval
    dropped = 0
    if deadline < now:
        dropped = int((now - deadline) // interval)
        deadline += dropped * interval
    return deadline, dropped


class PollLoop:
    """Probe → decide → notify, once per tick, until shutdown."""

    def __init__(
        self,
        config: WatchConfig,
        prober: BaseProber,
        player: BasePlayer,
        shutdown: ShutdownSignal,
        logger: Optional[logging.Logger] = None,
        *,
        policy: Optional[SuccessPolicy] = None,
        counter: Optional[AttemptCounter] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.config = config
        self.prober = prober
        self.player = player
        self.shutdown = shutdown
        self.policy = policy or SuccessPolicy(config.success_status)
        self.attempts = counter or AttemptCounter()

        self.state = LoopState.WAITING
        self.notifications = 0
        self._playbacks: Set[asyncio.Task] = set()

    # -------------------------------------------------------------------- #
    async def run(self) -> str:
        """Tick until shutdown is requested; return the shutdown reason."""
        loop = asyncio.get_running_loop()
        interval = self.config.interval
        deadline = loop.time() + interval

        self.logger.info(
            "✅ PollLoop started – checking %s every %gs, waiting for status %s (notify: %s)",
            self.config.target_url,
            interval,
            self.policy.success_status,
            self.config.notify_mode,
        )
        try:
            while not self.shutdown.is_set():
                self.state = LoopState.WAITING
                if await self.shutdown.wait_for(deadline - loop.time()):
                    break
                if not await self._tick():
                    break
                deadline, dropped = next_deadline(deadline, interval, loop.time())
                if dropped:
                    self.logger.debug("Tick overran, dropped %d tick(s)", dropped)
        except asyncio.CancelledError:
            self.logger.info("PollLoop cancelled – shutting down")
            raise
        finally:
            await self._stop_playback()
            self.state = LoopState.SHUT_DOWN
            self.prober.log_metrics()

        reason = self.shutdown.reason or "stopped"
        self.logger.info(
            "Graceful shutdown... reason=%s attempts=%d notifications=%d",
            reason,
            self.attempts.value,
            self.notifications,
        )
        return reason

    # -------------------------------------------------------------------- #
    async def _tick(self) -> bool:
        """One probe-decide-notify cycle. False if shutdown cut it short."""
        attempt = self.attempts.increment()

        self.state = LoopState.PROBING
        outcome = await self._probe()
        if outcome is None:
            self.logger.info(
                "Abandoned in-flight probe | attempt=%d url=%s",
                attempt,
                self.config.target_url,
                extra={"attempt": attempt, "url": self.config.target_url, "abandoned": True},
            )
            return False

        self.state = LoopState.DECIDING
        matched = self.policy.matches(outcome)
        task = None
        if matched:
            self.state = LoopState.NOTIFYING
            task = self._start_playback()
        self._record(attempt, outcome, matched, notified=task is not None)

        if task is not None and self.config.notify_mode == "blocking":
            return await self._race(task)
        return True

    async def _probe(self) -> Optional[ProbeOutcome]:
        task = asyncio.create_task(self.prober.probe(self.shutdown))
        try:
            finished = await self._race(task)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if not finished:
            await self._abandon(task)
            return None
        try:
            return task.result()
        except Exception as exc:
            # a prober should report failures, not raise them
            return ProbeOutcome.from_error(exc)

    async def _race(self, task: asyncio.Task) -> bool:
        """Wait for *task* or shutdown, whichever comes first. True if *task* finished."""
        stopper = asyncio.create_task(self.shutdown.wait())
        try:
            done, _ = await asyncio.wait({task, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopper.cancel()
        return task in done

    async def _abandon(self, task: asyncio.Task) -> None:
        task.add_done_callback(_discard_result)
        task.cancel()
        done, _ = await asyncio.wait({task}, timeout=self.config.shutdown_grace)
        if not done:
            self.logger.warning(
                "Probe still unwinding after %gs grace – leaving it behind", self.config.shutdown_grace
            )

    # -------------------------------------------------------------------- #
    # Notification
    # -------------------------------------------------------------------- #
    def _start_playback(self) -> asyncio.Task:
        task = asyncio.create_task(self.player.play())
        self._playbacks.add(task)
        task.add_done_callback(self._on_playback_done)
        self.notifications += 1
        return task

    def _on_playback_done(self, task: asyncio.Task) -> None:
        self._playbacks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error("Notification playback failed: %s", exc, exc_info=exc)

    async def _stop_playback(self) -> None:
        if not self._playbacks:
            return
        self.logger.info("Stopping notification playback")
        self.player.stop()
        pending = set(self._playbacks)
        for task in pending:
            task.cancel()
        await asyncio.wait(pending, timeout=self.config.shutdown_grace)

    # -------------------------------------------------------------------- #
    def _record(self, attempt: int, outcome: ProbeOutcome, matched: bool, notified: bool) -> None:
        if matched:
            msg = "Check matched"
        elif outcome.failed:
            msg = "Probe failed"
        else:
            msg = "Unmatched status code"

        fields = {
            "attempt": attempt,
            "status_code": outcome.status_code,
            "error": outcome.describe() if outcome.failed else None,
            "url": self.config.target_url,
            "interval": self.config.interval,
            "matched": matched,
            "notified": notified,
        }
        self.logger.log(
            self.policy.log_level(outcome),
            "%s | attempt=%d outcome=%s interval=%gs url=%s matched=%s notified=%s",
            msg,
            attempt,
            outcome.describe(),
            self.config.interval,
            self.config.target_url,
            matched,
            notified,
            extra=fields,
        )


def _discard_result(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()
