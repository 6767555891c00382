"""
success_policy.py
-----------------
Decides whether a probe outcome is the state we are waiting for.

The default success status is 404: on the watched booking site that is
what the endpoint answered once a slot opened up. It is configuration,
not a claim about HTTP semantics.
"""

from __future__ import annotations

import logging

from models.probe_outcome import ProbeOutcome

DEFAULT_SUCCESS_STATUS = 404


def matches(outcome: ProbeOutcome, success_status: int) -> bool:
    """True iff the probe reached the server and got exactly *success_status*."""
    if outcome.transport_error is not None:
        return False
    return outcome.status_code == success_status


class SuccessPolicy:
    """Binds :func:`matches` to a configured status and picks log severities."""

    def __init__(self, success_status: int = DEFAULT_SUCCESS_STATUS) -> None:
        self.success_status = success_status

    def matches(self, outcome: ProbeOutcome) -> bool:
        return matches(outcome, self.success_status)

    def log_level(self, outcome: ProbeOutcome) -> int:
        # a network failure outranks an unexpected-but-valid status
        if outcome.failed and not outcome.cancelled:
            return logging.WARNING
        return logging.INFO

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(success_status={self.success_status})"
