"""Parsing of duration strings such as ``"10s"``, ``"1m30s"`` or ``"250ms"``.

The accepted syntax is a possibly signed sequence of decimal numbers, each
with an optional fraction and a mandatory unit suffix. Valid units are
``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and ``h``. A bare ``"0"`` is
also accepted.
"""

from __future__ import annotations

import re
from typing import Dict

_UNITS: Dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # micro sign
    "μs": 1e-6,  # greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"([0-9]*)(\.[0-9]*)?(ns|us|µs|μs|ms|s|m|h)")

# Largest duration representable as signed 64-bit nanoseconds
MAX_DURATION_SECONDS = (2**63 - 1) / 1e9


def parse_duration(value: str) -> float:
    """Return the duration in seconds.

    Raises:
        ValueError: if ``value`` is not a valid duration string.
    """
    text = value
    sign = 1.0
    if text[:1] in ("-", "+"):
        if text[0] == "-":
            sign = -1.0
        text = text[1:]
    if text == "0":
        return 0.0
    if not text:
        raise ValueError(f"invalid duration {value!r}")

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration {value!r}")
        whole, frac, unit = match.groups()
        if not whole and (not frac or frac == "."):
            raise ValueError(f"invalid duration {value!r}")
        total += float((whole or "0") + (frac or "")) * _UNITS[unit]
        if total > MAX_DURATION_SECONDS:
            raise ValueError(f"invalid duration {value!r}: out of range")
        pos = match.end()
    return sign * total


__all__ = ["MAX_DURATION_SECONDS", "parse_duration"]
