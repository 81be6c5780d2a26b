"""
Unit tests for QuoteService.

Tests unit conversion, route selection and failure mapping.
"""

import pytest

from roundtrip.core.types import Token
from roundtrip.exchange.client import JupiterClientError, NoRouteError
from roundtrip.market.quotes import QuoteService
from roundtrip.strategy.route_filter import RouteFilter
from roundtrip.telemetry.metrics import MetricsCollector
from tests.mocks.aggregator import MockRouteProvider, make_route


class TestQuoteService:
    """Tests for QuoteService."""

    @pytest.fixture
    def provider(self) -> MockRouteProvider:
        """Create an unscripted routing capability."""
        return MockRouteProvider()

    @pytest.fixture
    def service(
        self,
        provider: MockRouteProvider,
        route_filter: RouteFilter,
        metrics: MetricsCollector,
    ) -> QuoteService:
        """Create a quote service over the mock provider."""
        return QuoteService(provider, route_filter, slippage_bps=50, metrics=metrics)

    @pytest.mark.asyncio
    async def test_quote_converts_units(
        self, service: QuoteService, provider: MockRouteProvider, usdc: Token, sol: Token
    ) -> None:
        """Test that amounts go out atomic and come back human."""
        route = make_route(usdc.address, sol.address, 1_000_000, 1_020_000_000)
        provider.set_routes(usdc.address, sol.address, [route])

        quote = await service.get_quote(usdc, sol, 1.0)

        assert quote.is_usable
        assert quote.route is route
        assert quote.input_amount == 1.0
        assert quote.output_amount == pytest.approx(1.02)
        assert provider.calls == [(usdc.address, sol.address, 1_000_000, 50, True)]

    @pytest.mark.asyncio
    async def test_quote_skips_expensive_route(
        self, service: QuoteService, provider: MockRouteProvider, usdc: Token, sol: Token
    ) -> None:
        """Test that the fee ceiling picks the next candidate."""
        expensive = make_route(
            usdc.address, sol.address, 1_000_000, 1_030_000_000, labels=("Pricey",), fees=(1.5,)
        )
        cheap = make_route(usdc.address, sol.address, 1_000_000, 1_020_000_000)
        provider.set_routes(usdc.address, sol.address, [expensive, cheap])

        quote = await service.get_quote(usdc, sol, 1.0)

        assert quote.route is cheap
        assert quote.output_amount == pytest.approx(1.02)

    @pytest.mark.asyncio
    async def test_all_routes_too_expensive(
        self, service: QuoteService, provider: MockRouteProvider, usdc: Token, sol: Token
    ) -> None:
        """Test that no quote is produced when every route breaks the ceiling."""
        provider.set_routes(
            usdc.address,
            sol.address,
            [make_route(usdc.address, sol.address, 1_000_000, 1_030_000_000, fees=(0.8,))],
        )

        quote = await service.get_quote(usdc, sol, 1.0)

        assert not quote.is_usable
        assert quote.route is None
        assert "fee ceiling" in quote.reason

    @pytest.mark.asyncio
    async def test_no_routes(
        self, service: QuoteService, provider: MockRouteProvider, usdc: Token, sol: Token
    ) -> None:
        """Test an empty candidate list."""
        quote = await service.get_quote(usdc, sol, 1.0)

        assert not quote.is_usable
        assert quote.reason == "no routes"

    @pytest.mark.asyncio
    async def test_routing_error_is_absorbed(
        self,
        service: QuoteService,
        provider: MockRouteProvider,
        metrics: MetricsCollector,
        usdc: Token,
        sol: Token,
    ) -> None:
        """Test that a routing failure becomes an unusable quote."""
        provider.queue(usdc.address, sol.address, JupiterClientError("connection reset"))

        quote = await service.get_quote(usdc, sol, 1.0)

        assert not quote.is_usable
        assert quote.reason.startswith("routing error")
        assert metrics.stats.quotes_requested == 1
        assert metrics.stats.quotes_failed == 1

    @pytest.mark.asyncio
    async def test_no_route_error_is_absorbed(
        self, service: QuoteService, provider: MockRouteProvider, usdc: Token, sol: Token
    ) -> None:
        """Test the aggregator's explicit no-route answer."""
        provider.queue(usdc.address, sol.address, NoRouteError("no route"))

        quote = await service.get_quote(usdc, sol, 1.0)

        assert not quote.is_usable

    @pytest.mark.asyncio
    async def test_unknown_token(
        self, service: QuoteService, provider: MockRouteProvider, usdc: Token
    ) -> None:
        """Test that a missing token is not sent to the aggregator."""
        quote = await service.get_quote(usdc, None, 1.0)

        assert not quote.is_usable
        assert quote.reason == "unknown token"
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_dust_amount(
        self, service: QuoteService, provider: MockRouteProvider, usdc: Token, sol: Token
    ) -> None:
        """Test that an amount below one atomic unit is not quoted."""
        quote = await service.get_quote(usdc, sol, 0.0000001)

        assert not quote.is_usable
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_zero_output(
        self, service: QuoteService, provider: MockRouteProvider, usdc: Token, sol: Token
    ) -> None:
        """Test that a route returning nothing is not usable."""
        provider.set_routes(
            usdc.address, sol.address, [make_route(usdc.address, sol.address, 1_000_000, 0)]
        )

        quote = await service.get_quote(usdc, sol, 1.0)

        assert not quote.is_usable

    @pytest.mark.asyncio
    async def test_latency_recorded(
        self,
        service: QuoteService,
        provider: MockRouteProvider,
        metrics: MetricsCollector,
        usdc: Token,
        sol: Token,
    ) -> None:
        """Test that successful quotes feed the latency window."""
        provider.set_routes(
            usdc.address,
            sol.address,
            [make_route(usdc.address, sol.address, 1_000_000, 1_020_000_000)],
        )

        await service.get_quote(usdc, sol, 1.0)
        await service.get_quote(usdc, sol, 1.0)

        assert metrics.stats.quotes_requested == 2
        assert metrics.stats.quotes_failed == 0
        assert metrics.get_latency_stats("quote").count == 2
