"""Utility functions for the round-trip engine."""

from roundtrip.utils.math import format_profit, from_atomic, safe_divide, to_atomic
from roundtrip.utils.time import (
    LatencyTimer,
    format_duration_us,
    get_timestamp_us,
    wait_with_stop,
)


__all__ = [
    "LatencyTimer",
    "format_duration_us",
    "format_profit",
    "from_atomic",
    "get_timestamp_us",
    "safe_divide",
    "to_atomic",
    "wait_with_stop",
]
