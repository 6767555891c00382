import asyncio

import pytest

from core.signal_handler import ShutdownSignal
from models.probe_outcome import ProbeOutcome
from models.watch_config import WatchConfig
from modules.prober import BaseProber
from notifiers.base import BasePlayer


# ------------------------- Fakes ------------------------- #

class FakePlayer(BasePlayer):
    """Records plays; each one 'sounds' for *duration* seconds."""

    def __init__(self, duration: float = 0.0, error: Exception | None = None):
        self.duration = duration
        self.error = error
        self.plays = 0
        self.completed = 0
        self.stops = 0

    async def play(self) -> None:
        self.plays += 1
        if self.error is not None:
            raise self.error
        await asyncio.sleep(self.duration)
        self.completed += 1

    def stop(self) -> None:
        self.stops += 1


class ScriptedProber(BaseProber):
    """
    Replays a fixed list of outcomes (ints are status codes, exceptions are
    transport errors). Once the script runs out it requests shutdown and
    hangs, like a request that never answers.
    """

    def __init__(self, script, shutdown: ShutdownSignal, delay: float = 0.0):
        self.script = list(script)
        self.shutdown = shutdown
        self.delay = delay
        self.calls = 0
        self.metrics_logged = 0

    async def probe(self, cancellation=None) -> ProbeOutcome:
        self.calls += 1
        if not self.script:
            self.shutdown.request("script exhausted")
            await asyncio.sleep(3600)
        step = self.script.pop(0)
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(step, BaseException):
            return ProbeOutcome.from_error(step)
        return ProbeOutcome.from_status(step)

    def log_metrics(self) -> None:
        self.metrics_logged += 1


# ------------------------- Fixtures ------------------------- #

@pytest.fixture
def make_config():
    def _make(**kwargs):
        settings = {
            "target_url": "http://watch.test/eAppointment/appointment.do",
            "interval": 0.01,
            "success_status": 404,
            "sound_file": "alert.wav",
            "request_timeout": 1.0,
            "shutdown_grace": 0.5,
        }
        settings.update(kwargs)
        return WatchConfig(**settings)

    return _make


@pytest.fixture
def shutdown():
    return ShutdownSignal()


@pytest.fixture
def player():
    return FakePlayer()


def tick_records(caplog):
    """Per-tick structured events emitted by the poll loop."""
    return [r for r in caplog.records if hasattr(r, "matched")]
