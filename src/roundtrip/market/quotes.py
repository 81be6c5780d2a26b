"""
Quote service.

Wraps the routing capability and turns its answer, or its failure, into
a QuoteResult in human units. Nothing raised by the routing capability
escapes this module.
"""

import logging

from roundtrip.core.types import QuoteResult, RouteProvider, Token
from roundtrip.strategy.route_filter import RouteFilter
from roundtrip.telemetry.metrics import MetricsCollector
from roundtrip.utils.math import from_atomic, to_atomic
from roundtrip.utils.time import LatencyTimer


logger = logging.getLogger(__name__)


class QuoteService:
    """
    Produces quotes for one swap direction at a time.

    Every request forces a fresh route computation so that a cached price
    is never traded on.
    """

    def __init__(
        self,
        provider: RouteProvider,
        route_filter: RouteFilter,
        slippage_bps: int,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """
        Initialize quote service.

        Args:
            provider: Routing capability.
            route_filter: Fee ceiling applied to candidates.
            slippage_bps: Slippage tolerance in basis points.
            metrics: Optional metrics collector.
        """
        self._provider = provider
        self._filter = route_filter
        self._slippage_bps = slippage_bps
        self._metrics = metrics

    async def get_quote(
        self,
        input_token: Token | None,
        output_token: Token | None,
        input_amount: float,
    ) -> QuoteResult:
        """
        Quote a swap of input_amount from input_token to output_token.

        Args:
            input_token: Token sold.
            output_token: Token bought.
            input_amount: Amount sold in human units.

        Returns:
            QuoteResult; unusable when no acceptable route exists.
        """
        if input_token is None or output_token is None:
            return QuoteResult.unavailable("unknown token", input_amount)

        amount = to_atomic(input_amount, input_token.decimals)
        if amount <= 0:
            return QuoteResult.unavailable("amount rounds to zero", input_amount)

        pair = f"{input_token.symbol}->{output_token.symbol}"
        timer = LatencyTimer()
        try:
            with timer:
                routes = await self._provider.compute_routes(
                    input_token.address,
                    output_token.address,
                    amount,
                    self._slippage_bps,
                    force_fetch=True,
                )
        except Exception as e:
            logger.warning(f"Quote {pair} failed: {e}")
            self._record(timer.latency_us, ok=False)
            return QuoteResult.unavailable(f"routing error: {e}", input_amount)

        self._record(timer.latency_us, ok=True)

        if not routes:
            logger.info(f"Quote {pair}: no routes")
            return QuoteResult.unavailable("no routes", input_amount)

        route = self._filter.select(routes)
        if route is None:
            logger.info(
                f"Quote {pair}: all {len(routes)} routes exceed {self._filter.max_fee_pct}% fee"
            )
            return QuoteResult.unavailable("all routes exceed fee ceiling", input_amount)

        output_amount = from_atomic(route.out_amount, output_token.decimals)
        if output_amount <= 0:
            return QuoteResult.unavailable("non-positive output", input_amount)

        logger.info(
            f"Quote {pair}: {len(routes)} route(s), using {route.labels} "
            f"{input_amount} -> {output_amount}"
        )
        return QuoteResult(
            input_amount=input_amount,
            output_amount=output_amount,
            route=route,
        )

    def _record(self, latency_us: int, ok: bool) -> None:
        if self._metrics is not None:
            self._metrics.record_quote(latency_us, ok)
