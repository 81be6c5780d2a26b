"""
Periodic status reporting.

Logs a one-line status every interval and prints a session summary on
shutdown.
"""

import asyncio
import logging
import sys
from datetime import timedelta
from typing import TextIO

from roundtrip.core.types import CycleStatus
from roundtrip.telemetry.metrics import QUOTE_LATENCY, SWAP_LATENCY, MetricsCollector
from roundtrip.utils.math import format_profit
from roundtrip.utils.time import format_duration_us


logger = logging.getLogger(__name__)


class StatusReporter:
    """
    Status line and summary output for the polling loop.

    Reads metrics only; it never touches the trading state.
    """

    def __init__(
        self,
        metrics: MetricsCollector,
        base_symbol: str = "",
        dry_run: bool = True,
        output: TextIO | None = None,
    ) -> None:
        """
        Initialize reporter.

        Args:
            metrics: Metrics collector instance.
            base_symbol: Symbol profits are denominated in.
            dry_run: Whether running in dry-run mode.
            output: Summary stream (default: stdout).
        """
        self._metrics = metrics
        self._base_symbol = base_symbol
        self._dry_run = dry_run
        self._output = output or sys.stdout
        self._task: asyncio.Task[None] | None = None

    @staticmethod
    def _format_uptime(seconds: float) -> str:
        """Format uptime as HH:MM:SS."""
        total = int(timedelta(seconds=int(seconds)).total_seconds())
        hours, remainder = divmod(total, 3600)
        minutes, secs = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    def get_status_line(self) -> str:
        """Get a single-line status update."""
        stats = self._metrics.stats
        quote = self._metrics.get_latency_stats(QUOTE_LATENCY)
        quote_avg = format_duration_us(int(quote.avg_us)) if quote.count else "---"

        return (
            f"{'[DRY RUN] ' if self._dry_run else ''}"
            f"Cycles: {stats.cycles} | "
            f"Opp: {stats.opportunities} | "
            f"Trips: {stats.round_trips_completed} | "
            f"Leg1 fail: {stats.leg1_failures} | "
            f"Leg2 fail: {stats.leg2_failures} | "
            f"Net: {format_profit(stats.total_net, self._base_symbol)} | "
            f"Quote: {quote_avg}"
        )

    async def run(self, interval: float) -> None:
        """Log the status line every interval seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            logger.info(self.get_status_line())

    def start(self, interval: float) -> asyncio.Task[None]:
        """Start the reporter as a background task."""
        self._task = asyncio.create_task(self.run(interval))
        return self._task

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def print_summary(self) -> None:
        """Print a final session summary."""
        stats = self._metrics.stats
        quote = self._metrics.get_latency_stats(QUOTE_LATENCY)
        swap = self._metrics.get_latency_stats(SWAP_LATENCY)
        out = self._output

        out.write("\n" + "=" * 50 + "\n")
        out.write("  SESSION SUMMARY\n")
        out.write("=" * 50 + "\n")
        out.write(f"  Uptime: {self._format_uptime(self._metrics.uptime_seconds)}\n")
        out.write(f"  Cycles: {stats.cycles:,}\n")
        out.write(
            f"    No quote:     {self._metrics.get_outcome_count(CycleStatus.NO_QUOTE):,}\n"
        )
        out.write(
            f"    Unprofitable: {self._metrics.get_outcome_count(CycleStatus.UNPROFITABLE):,}\n"
        )
        out.write("\n  QUOTES:\n")
        out.write(f"    Requested:  {stats.quotes_requested:,}\n")
        out.write(f"    Failed:     {stats.quotes_failed:,}\n")
        if quote.count:
            out.write(f"    Latency:    avg {format_duration_us(int(quote.avg_us))}, ")
            out.write(f"p99 {format_duration_us(quote.p99_us)}\n")
        out.write("\n  EXECUTION:\n")
        out.write(f"    Opening swaps: {stats.leg1_executions:,} ({stats.leg1_failures:,} failed)\n")
        out.write(f"    Closing swaps: {stats.leg2_executions:,} ({stats.leg2_failures:,} failed)\n")
        if swap.count:
            out.write(f"    Latency:       avg {format_duration_us(int(swap.avg_us))}\n")
        out.write(f"    Round trips:   {stats.round_trips_completed:,}\n")
        if stats.positions_left_open:
            out.write(f"    Left open:     {stats.positions_left_open:,}\n")
        out.write("\n  P&L:\n")
        out.write(f"    Gross: {format_profit(stats.total_gross, self._base_symbol)}\n")
        out.write(f"    Net:   {format_profit(stats.total_net, self._base_symbol)}\n")
        if stats.round_trips_completed:
            out.write(f"    Best:  {format_profit(stats.best_net, self._base_symbol)}\n")
        out.write("=" * 50 + "\n")
        out.flush()
