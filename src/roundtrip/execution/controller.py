"""
Round-trip execution controller.

Drives the polling loop: quote both legs, evaluate, open the position,
close it, and back off after failures. One cycle moves through

    QUOTING_LEG1 -> QUOTING_LEG2 -> EVALUATING -> EXECUTING_LEG1
    -> EXECUTING_LEG2 (-> retries) -> DONE

and returns a CycleReport. The stop event is honoured before every quote
and during every wait.
"""

import asyncio
import logging
from dataclasses import dataclass

from roundtrip.config.settings import Settings
from roundtrip.core.types import (
    CycleReport,
    CycleStatus,
    Leg,
    ProfitEstimate,
    ProfitSink,
    SwapExecutor,
    Token,
)
from roundtrip.execution.backoff import FailureBackoff, RotatingBackoff
from roundtrip.execution.recovery import PositionRecovery, Sleeper
from roundtrip.market.quotes import QuoteService
from roundtrip.strategy.calculator import ProfitCalculator
from roundtrip.telemetry.metrics import MetricsCollector
from roundtrip.utils.math import format_profit, from_atomic
from roundtrip.utils.time import wait_with_stop


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ControllerConfig:
    """Controller configuration."""

    probe_amount: float = 1.0
    min_profit: float = 0.0
    min_profit_retry: float = 0.0
    quote_spacing: float = 0.05
    leg1_retry_delay: float = 5.0
    leg2_retry_delay: float = 1.0
    leg2_retry_reset_count: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> "ControllerConfig":
        """Build from application settings."""
        return cls(
            probe_amount=settings.in_amount,
            min_profit=settings.min_profit,
            min_profit_retry=settings.min_profit_swap2_retry,
            quote_spacing=settings.quote_spacing_seconds,
            leg1_retry_delay=settings.swap1_failed_delay,
            leg2_retry_delay=settings.swap2_failed_delay,
            leg2_retry_reset_count=settings.swap2_failed_reset_count,
        )


class RoundTripController:
    """
    Two-leg round-trip state machine and its outer loop.

    Retry state lives on the instance: the opening-leg FailureBackoff
    and the closing-leg RotatingBackoff. Both can be injected.
    """

    def __init__(
        self,
        quotes: QuoteService,
        executor: SwapExecutor,
        calculator: ProfitCalculator,
        base_token: Token | None,
        intermediate_token: Token | None,
        config: ControllerConfig | None = None,
        profit_sink: ProfitSink | None = None,
        metrics: MetricsCollector | None = None,
        stop_event: asyncio.Event | None = None,
        sleep: Sleeper | None = None,
        leg1_backoff: FailureBackoff | None = None,
        leg2_backoff: RotatingBackoff | None = None,
    ) -> None:
        """
        Initialize controller.

        Args:
            quotes: Quote service.
            executor: Swap executor.
            calculator: Profit evaluator.
            base_token: Token every round trip starts and ends in.
            intermediate_token: Token held between the legs.
            config: Controller configuration.
            profit_sink: Receives one entry per completed round trip.
            metrics: Optional metrics collector.
            stop_event: Set to stop the loop.
            sleep: Wait used for every delay (default: interruptible on stop_event).
            leg1_backoff: Opening-leg failure backoff.
            leg2_backoff: Closing-leg rotating backoff.
        """
        self._quotes = quotes
        self._executor = executor
        self._calculator = calculator
        self._base = base_token
        self._intermediate = intermediate_token
        self._config = config or ControllerConfig()
        self._profit_sink = profit_sink
        self._metrics = metrics
        self._stop_event = stop_event or asyncio.Event()
        self._sleep: Sleeper = sleep or self._wait
        self._leg1_backoff = leg1_backoff or FailureBackoff(self._config.leg1_retry_delay)
        self._leg2_backoff = leg2_backoff or RotatingBackoff(
            self._config.leg2_retry_delay,
            self._config.leg2_retry_reset_count,
        )
        self._recovery = PositionRecovery(
            quotes=quotes,
            executor=executor,
            calculator=calculator,
            base_token=base_token,
            intermediate_token=intermediate_token,
            probe_amount=self._config.probe_amount,
            min_profit_retry=self._config.min_profit_retry,
            backoff=self._leg2_backoff,
            stop_event=self._stop_event,
            sleep=self._sleep,
            metrics=metrics,
        )

    async def _wait(self, seconds: float) -> None:
        await wait_with_stop(self._stop_event, seconds)

    # =========================================================================
    # Loop
    # =========================================================================

    async def run(self) -> None:
        """Run cycles until the stop event is set."""
        base = self._base.symbol if self._base else "?"
        intermediate = self._intermediate.symbol if self._intermediate else "?"
        logger.info(
            f"Round trip {base} -> {intermediate} -> {base}, "
            f"probe {self._config.probe_amount} {base}, min profit {self._config.min_profit}"
        )

        while not self._stop_event.is_set():
            report = await self.run_cycle()
            if self._metrics is not None:
                self._metrics.record_cycle(report.status)

            if report.status in (CycleStatus.CANCELLED, CycleStatus.POSITION_OPEN):
                break

            await self._sleep(report.delay)

        logger.info("Round-trip loop stopped")

    def stop(self) -> None:
        """Request the loop to stop at its next suspension point."""
        self._stop_event.set()

    # =========================================================================
    # Cycle
    # =========================================================================

    async def run_cycle(self, backoff: FailureBackoff | None = None) -> CycleReport:
        """
        Run one outer-loop iteration.

        Args:
            backoff: Opening-leg backoff to use (default: the controller's own).

        Returns:
            CycleReport; its delay is the wait before the next cycle.
        """
        if backoff is None:
            backoff = self._leg1_backoff
        config = self._config

        if self._stop_event.is_set():
            return CycleReport(status=CycleStatus.CANCELLED)

        base, intermediate = self._base, self._intermediate
        if base is None or intermediate is None:
            return self._idle(CycleStatus.NO_QUOTE, backoff)

        # Leg 1 quote
        quote1 = await self._quotes.get_quote(base, intermediate, config.probe_amount)
        if not quote1.is_usable or quote1.route is None:
            return self._idle(CycleStatus.NO_QUOTE, backoff)

        await self._sleep(config.quote_spacing)
        if self._stop_event.is_set():
            return CycleReport(status=CycleStatus.CANCELLED)

        # Leg 2 quote for what leg 1 would return
        quote2 = await self._quotes.get_quote(intermediate, base, quote1.output_amount)
        if not quote2.is_usable or quote2.route is None:
            return self._idle(CycleStatus.NO_QUOTE, backoff)

        profit = self._calculator.evaluate(config.probe_amount, quote2.output_amount)
        if not profit.meets(config.min_profit):
            logger.debug(
                f"Unprofitable: gross {profit.gross:.6f}, net {profit.net:.6f} "
                f"< {config.min_profit:.6f}"
            )
            report = self._idle(CycleStatus.UNPROFITABLE, backoff)
            report.profit = profit
            return report

        logger.info(
            f"Opportunity: {quote1.route.labels} | {quote2.route.labels} "
            f"gross {profit.gross:.6f}, net {profit.net:.6f}"
        )
        if self._metrics is not None:
            self._metrics.record_opportunity(profit)

        # Leg 1 execution
        leg1 = await self._executor.execute(quote1.route)
        if self._metrics is not None:
            self._metrics.record_swap(Leg.OPEN, leg1.success, leg1.latency_us)

        if not leg1.success:
            backoff.record_failure()
            logger.warning(
                f"Opening swap failed ({leg1.error}), "
                f"{backoff.failures} consecutive, waiting {backoff.delay:.1f}s"
            )
            return CycleReport(
                status=CycleStatus.LEG1_FAILED,
                profit=profit,
                leg1=leg1,
                delay=backoff.delay,
            )
        backoff.record_success()

        # Leg 2 with whatever leg 1 actually delivered
        held_atomic = leg1.output_amount
        if held_atomic is None or held_atomic == quote1.route.out_amount:
            held_amount = quote1.output_amount
            close_route = quote2.route
        else:
            held_amount = from_atomic(held_atomic, intermediate.decimals)
            close_route = None
            logger.info(
                f"Opening swap delivered {held_amount} instead of {quote1.output_amount}, "
                f"re-quoting closing leg"
            )

        result = await self._recovery.close(
            held_amount,
            route=close_route,
            quoted_output=quote2.output_amount,
        )

        if not result.closed:
            logger.critical(
                f"Stopped with open position: {held_amount} {intermediate.symbol} "
                f"after {result.attempts} closing attempt(s)"
            )
            return CycleReport(
                status=CycleStatus.POSITION_OPEN,
                profit=profit,
                leg1=leg1,
                leg2_attempts=result.attempts,
                held_amount=held_amount,
            )

        realized = result.profit or profit
        leg2 = result.outcome
        self._record_profit(realized, base.symbol, (leg1.tx_id, leg2.tx_id if leg2 else None))

        return CycleReport(
            status=CycleStatus.COMPLETED,
            profit=realized,
            leg1=leg1,
            leg2=leg2,
            leg2_attempts=result.attempts,
            held_amount=held_amount,
            delay=backoff.delay,
        )

    def _idle(self, status: CycleStatus, backoff: FailureBackoff) -> CycleReport:
        """Report a cycle that opened nothing; waits at least the quote spacing."""
        return CycleReport(
            status=status,
            delay=max(backoff.delay, self._config.quote_spacing),
        )

    def _record_profit(
        self,
        profit: ProfitEstimate,
        symbol: str,
        tx_ids: tuple[str | None, ...],
    ) -> None:
        logger.info(
            f"Round trip complete: GROSS {format_profit(profit.gross, symbol)} "
            f"- NET {format_profit(profit.net, symbol)}"
        )
        if self._metrics is not None:
            self._metrics.record_round_trip(profit)
        if self._profit_sink is not None:
            self._profit_sink.record(profit, tx_ids)

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def leg1_backoff(self) -> FailureBackoff:
        """Opening-leg failure backoff."""
        return self._leg1_backoff

    @property
    def leg2_backoff(self) -> RotatingBackoff:
        """Closing-leg rotating backoff."""
        return self._leg2_backoff

    @property
    def stop_event(self) -> asyncio.Event:
        """Event that stops the loop."""
        return self._stop_event
