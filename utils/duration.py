# utils/duration.py
import re

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-z]*)\s*$")

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def normalize_unit(unit: str) -> str:
    """
    Map a bunch of aliases to a canonical unit key ('ms', 's', 'm', 'h').
    Extend if you add more.
    """
    u = unit.lower()
    aliases = {
        "ms": ["ms", "msec", "millis", "milliseconds"],
        "s": ["", "s", "sec", "secs", "second", "seconds"],
        "m": ["m", "min", "mins", "minute", "minutes"],
        "h": ["h", "hr", "hrs", "hour", "hours"],
    }
    for canon, alts in aliases.items():
        if u in alts:
            return canon
    return u


def parse_duration(value) -> float:
    """Return *value* in seconds. Accepts plain numbers or strings like '500ms', '5s', '2m'."""
    if isinstance(value, bool):
        raise TypeError("duration must be a number or a string, not bool")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        raise TypeError(f"duration must be a number or a string, got {type(value).__name__}")

    match = _DURATION_RE.match(value.lower())
    if not match:
        raise ValueError(f"invalid duration: {value!r}")
    amount, unit = match.groups()
    canon = normalize_unit(unit)
    if canon not in _UNIT_SECONDS:
        raise ValueError(f"unknown duration unit {unit!r} in {value!r}")
    return float(amount) * _UNIT_SECONDS[canon]
