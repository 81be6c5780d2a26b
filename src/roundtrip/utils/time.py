"""
Time helpers for latency measurement.

Quote and swap latencies are tracked in microseconds; the bucket and
cache clocks use the monotonic clock so wall-clock jumps cannot stall them.
"""

import asyncio
import time


def get_timestamp_us() -> int:
    """Current Unix time in microseconds."""
    return time.time_ns() // 1000


def monotonic_s() -> float:
    """Monotonic clock in seconds, for intervals only."""
    return time.monotonic()


class LatencyTimer:
    """
    Context manager measuring the wall time of a block.

    Example:
        >>> with LatencyTimer() as timer:
        ...     await client.get_quote(...)
        >>> timer.latency_us
    """

    __slots__ = ("start_us", "end_us", "latency_us")

    def __init__(self) -> None:
        self.start_us: int = 0
        self.end_us: int = 0
        self.latency_us: int = 0

    def __enter__(self) -> "LatencyTimer":
        self.start_us = get_timestamp_us()
        return self

    def __exit__(self, *args: object) -> None:
        self.end_us = get_timestamp_us()
        self.latency_us = self.end_us - self.start_us


def format_duration_us(duration_us: int) -> str:
    """
    Render a microsecond duration with a readable unit.

    Examples:
        >>> format_duration_us(500)
        '500μs'
        >>> format_duration_us(1500)
        '1.50ms'
        >>> format_duration_us(1500000)
        '1.50s'
    """
    if duration_us < 1000:
        return f"{duration_us}μs"
    elif duration_us < 1_000_000:
        return f"{duration_us / 1000:.2f}ms"
    else:
        return f"{duration_us / 1_000_000:.2f}s"


async def wait_with_stop(stop_event: asyncio.Event, timeout_seconds: float) -> None:
    """
    Sleep for timeout_seconds or until stop_event is set, whichever is first.

    A non-positive timeout still yields to the event loop once.
    """
    if timeout_seconds <= 0:
        await asyncio.sleep(0)
        return

    try:
        await asyncio.wait_for(stop_event.wait(), timeout=timeout_seconds)
    except TimeoutError:
        pass
