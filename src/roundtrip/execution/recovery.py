"""
Closing-leg recovery.

Once the opening swap has landed the wallet holds the intermediate token.
That position is only ever unwound by selling it back into the base
token; there is no stop loss. Failed closing swaps are retried for as
long as the process runs, under a relaxed profit bar and a rotating
backoff.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from roundtrip.core.types import Leg, ProfitEstimate, Route, SwapExecutor, SwapOutcome, Token
from roundtrip.execution.backoff import RotatingBackoff
from roundtrip.market.quotes import QuoteService
from roundtrip.strategy.calculator import ProfitCalculator
from roundtrip.telemetry.metrics import MetricsCollector
from roundtrip.utils.math import from_atomic


logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(slots=True)
class RecoveryResult:
    """Result of closing an open position."""

    closed: bool
    attempts: int
    held_amount: float
    outcome: SwapOutcome | None = None
    profit: ProfitEstimate | None = None


class PositionRecovery:
    """
    Sells a held intermediate position back into the base token.

    The first attempt uses the route priced before the opening swap when
    one is supplied. Every later attempt waits for the rotating backoff,
    re-quotes the held amount and only executes when the round trip
    still returns more than the probe amount with net profit at or above
    the retry threshold.
    """

    def __init__(
        self,
        quotes: QuoteService,
        executor: SwapExecutor,
        calculator: ProfitCalculator,
        base_token: Token | None,
        intermediate_token: Token | None,
        probe_amount: float,
        min_profit_retry: float,
        backoff: RotatingBackoff,
        stop_event: asyncio.Event,
        sleep: Sleeper,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """
        Initialize recovery handler.

        Args:
            quotes: Quote service for re-pricing the closing leg.
            executor: Swap executor.
            calculator: Profit evaluator.
            base_token: Token the position is sold into.
            intermediate_token: Token held.
            probe_amount: Base amount the round trip started with.
            min_profit_retry: Net profit required on retried attempts.
            backoff: Rotating retry delay.
            stop_event: Set when the process is shutting down.
            sleep: Interruptible wait.
            metrics: Optional metrics collector.
        """
        self._quotes = quotes
        self._executor = executor
        self._calculator = calculator
        self._base = base_token
        self._intermediate = intermediate_token
        self._probe_amount = probe_amount
        self._min_profit_retry = min_profit_retry
        self._backoff = backoff
        self._stop_event = stop_event
        self._sleep = sleep
        self._metrics = metrics

    async def close(
        self,
        held_amount: float,
        route: Route | None = None,
        quoted_output: float = 0.0,
    ) -> RecoveryResult:
        """
        Close the position, retrying until success or shutdown.

        Args:
            held_amount: Intermediate amount held, human units.
            route: Closing route priced before the opening swap, if still valid.
            quoted_output: Base amount that route was quoted to return.

        Returns:
            RecoveryResult; closed is False only when shutdown interrupted it.
        """
        attempts = 0
        self._backoff.reset()

        if route is not None:
            attempts += 1
            outcome = await self._execute(route)
            if outcome.success:
                return self._closed(held_amount, attempts, outcome, quoted_output)
            logger.warning(
                f"Closing swap failed ({outcome.error}), retrying with {held_amount} held"
            )

        while True:
            if self._stop_event.is_set():
                return RecoveryResult(closed=False, attempts=attempts, held_amount=held_amount)

            delay = self._backoff.next_delay()
            if delay > 0:
                logger.info(f"Retrying closing swap in {delay:.1f}s")
            await self._sleep(delay)

            if self._stop_event.is_set():
                return RecoveryResult(closed=False, attempts=attempts, held_amount=held_amount)

            quote = await self._quotes.get_quote(self._intermediate, self._base, held_amount)
            if not quote.is_usable or quote.route is None:
                logger.debug(f"Closing quote unavailable: {quote.reason}")
                continue

            profit = self._calculator.evaluate(self._probe_amount, quote.output_amount)
            if not profit.meets(self._min_profit_retry):
                logger.debug(
                    f"Closing quote below retry bar: net {profit.net:.6f} "
                    f"< {self._min_profit_retry:.6f}"
                )
                continue

            attempts += 1
            outcome = await self._execute(quote.route)
            if outcome.success:
                return self._closed(held_amount, attempts, outcome, quote.output_amount)

            logger.warning(f"Closing swap attempt {attempts} failed: {outcome.error}")

    async def _execute(self, route: Route) -> SwapOutcome:
        outcome = await self._executor.execute(route)
        if self._metrics is not None:
            self._metrics.record_swap(Leg.CLOSE, outcome.success, outcome.latency_us)
        return outcome

    def _closed(
        self,
        held_amount: float,
        attempts: int,
        outcome: SwapOutcome,
        quoted_output: float,
    ) -> RecoveryResult:
        output = quoted_output
        if outcome.output_amount is not None and self._base is not None:
            output = from_atomic(outcome.output_amount, self._base.decimals)

        return RecoveryResult(
            closed=True,
            attempts=attempts,
            held_amount=held_amount,
            outcome=outcome,
            profit=self._calculator.evaluate(self._probe_amount, output),
        )
