# --------------------------------------------------------------------
# models/probe_outcome.py
# One immutable record per probe: either the HTTP status code or the
# transport error that prevented one. Produced by the prober, consumed
# by the success policy and the poll loop.
# --------------------------------------------------------------------
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


class ProbeCancelled(Exception):
    """The probe was skipped or abandoned because shutdown was requested."""


@dataclass(frozen=True)
class ProbeOutcome:
    status_code: Optional[int] = None
    transport_error: Optional[BaseException] = None
    elapsed: float = 0.0  # seconds

    def __post_init__(self) -> None:
        if (self.status_code is None) == (self.transport_error is None):
            raise ValueError("exactly one of status_code or transport_error must be set")

    @classmethod
    def from_status(cls, status_code: int, elapsed: float = 0.0) -> ProbeOutcome:
        return cls(status_code=status_code, elapsed=elapsed)

    @classmethod
    def from_error(cls, error: BaseException, elapsed: float = 0.0) -> ProbeOutcome:
        return cls(transport_error=error, elapsed=elapsed)

    @property
    def failed(self) -> bool:
        return self.transport_error is not None

    @property
    def cancelled(self) -> bool:
        return isinstance(self.transport_error, ProbeCancelled)

    def describe(self) -> str:
        if self.transport_error is not None:
            msg = str(self.transport_error)
            name = type(self.transport_error).__name__
            return f"{name}: {msg}" if msg else name
        return str(self.status_code)
