"""
Metrics collection for the polling loop.

Tracks quote and swap latencies, round-trip counters and realized
profit with bounded in-memory storage.
"""

import time
from collections import deque
from dataclasses import dataclass

from roundtrip.core.types import CycleStatus, Leg, ProfitEstimate


QUOTE_LATENCY = "quote"
SWAP_LATENCY = "swap"


@dataclass
class LatencyStats:
    """Aggregated latency statistics."""

    min_us: int = 0
    max_us: int = 0
    avg_us: float = 0.0
    p50_us: int = 0
    p95_us: int = 0
    p99_us: int = 0
    count: int = 0


@dataclass
class RoundTripStats:
    """Round-trip trading statistics."""

    cycles: int = 0
    quotes_requested: int = 0
    quotes_failed: int = 0
    opportunities: int = 0
    leg1_executions: int = 0
    leg1_failures: int = 0
    leg2_executions: int = 0
    leg2_failures: int = 0
    round_trips_completed: int = 0
    positions_left_open: int = 0
    total_gross: float = 0.0
    total_net: float = 0.0
    best_net: float = 0.0

    @property
    def leg1_success_rate(self) -> float:
        """Share of opening swaps that landed."""
        return (
            (self.leg1_executions - self.leg1_failures) / self.leg1_executions
            if self.leg1_executions > 0
            else 0.0
        )

    @property
    def quote_failure_rate(self) -> float:
        """Share of quote requests that raised."""
        return self.quotes_failed / self.quotes_requested if self.quotes_requested > 0 else 0.0


class MetricsCollector:
    """
    Collects and aggregates loop metrics.

    Features:
    - Rolling window latency tracking
    - Cycle outcome counters
    - Profit accumulation
    """

    def __init__(self, latency_window_size: int = 1000) -> None:
        """
        Initialize metrics collector.

        Args:
            latency_window_size: Number of samples to keep for latency stats.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[int]] = {}
        self._outcomes: dict[CycleStatus, int] = {}
        self._stats = RoundTripStats()
        self._start_time = time.time()

    def record_latency(self, name: str, latency_us: int) -> None:
        """
        Record a latency measurement.

        Args:
            name: Metric name (QUOTE_LATENCY or SWAP_LATENCY).
            latency_us: Latency in microseconds.
        """
        if name not in self._latencies:
            self._latencies[name] = deque(maxlen=self._window_size)
        self._latencies[name].append(latency_us)

    def record_quote(self, latency_us: int, ok: bool) -> None:
        """Record one quote request."""
        self._stats.quotes_requested += 1
        if not ok:
            self._stats.quotes_failed += 1
        self.record_latency(QUOTE_LATENCY, latency_us)

    def record_opportunity(self, profit: ProfitEstimate) -> None:
        """Record a quoted round trip that cleared the entry threshold."""
        self._stats.opportunities += 1

    def record_swap(self, leg: Leg, success: bool, latency_us: int = 0) -> None:
        """
        Record one swap execution.

        Args:
            leg: Which leg was executed.
            success: Whether the swap landed.
            latency_us: Submission to confirmation latency.
        """
        if leg == Leg.OPEN:
            self._stats.leg1_executions += 1
            if not success:
                self._stats.leg1_failures += 1
        else:
            self._stats.leg2_executions += 1
            if not success:
                self._stats.leg2_failures += 1

        if latency_us:
            self.record_latency(SWAP_LATENCY, latency_us)

    def record_round_trip(self, profit: ProfitEstimate) -> None:
        """Record a completed round trip and its profit."""
        self._stats.round_trips_completed += 1
        self._stats.total_gross += profit.gross
        self._stats.total_net += profit.net
        if self._stats.round_trips_completed == 1 or profit.net > self._stats.best_net:
            self._stats.best_net = profit.net

    def record_cycle(self, status: CycleStatus) -> None:
        """Record the outcome of one outer-loop iteration."""
        self._stats.cycles += 1
        self._outcomes[status] = self._outcomes.get(status, 0) + 1
        if status == CycleStatus.POSITION_OPEN:
            self._stats.positions_left_open += 1

    def get_outcome_count(self, status: CycleStatus) -> int:
        """Number of cycles that ended with status."""
        return self._outcomes.get(status, 0)

    def get_latency_stats(self, name: str) -> LatencyStats:
        """
        Get latency statistics for a metric.

        Args:
            name: Metric name.

        Returns:
            LatencyStats with aggregated values.
        """
        samples = self._latencies.get(name)
        if not samples:
            return LatencyStats()

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        return LatencyStats(
            min_us=sorted_samples[0],
            max_us=sorted_samples[-1],
            avg_us=sum(sorted_samples) / n,
            p50_us=sorted_samples[n // 2],
            p95_us=sorted_samples[int(n * 0.95)],
            p99_us=sorted_samples[int(n * 0.99)] if n > 1 else sorted_samples[-1],
            count=n,
        )

    @property
    def stats(self) -> RoundTripStats:
        """Get round-trip statistics."""
        return self._stats

    @property
    def uptime_seconds(self) -> float:
        """Get uptime in seconds."""
        return time.time() - self._start_time

    @property
    def cycles_per_minute(self) -> float:
        """Average outer-loop iterations per minute."""
        minutes = self.uptime_seconds / 60
        return self._stats.cycles / minutes if minutes > 0 else 0.0

    def to_dict(self) -> dict[str, object]:
        """
        Export all metrics as a dict.

        Returns:
            Dict representation of all metrics.
        """
        return {
            "uptime_seconds": self.uptime_seconds,
            "outcomes": {status.value: count for status, count in self._outcomes.items()},
            "latencies": {
                name: {
                    "avg": stats.avg_us,
                    "p50": stats.p50_us,
                    "p99": stats.p99_us,
                    "count": stats.count,
                }
                for name, stats in (
                    (name, self.get_latency_stats(name)) for name in self._latencies
                )
            },
            "round_trips": {
                "completed": self._stats.round_trips_completed,
                "total_gross": self._stats.total_gross,
                "total_net": self._stats.total_net,
                "best_net": self._stats.best_net,
            },
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._latencies.clear()
        self._outcomes.clear()
        self._stats = RoundTripStats()
        self._start_time = time.time()
