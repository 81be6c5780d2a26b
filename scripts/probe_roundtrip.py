#!/usr/bin/env python3
"""
Round-Trip Probe Script.

Quotes the configured round trip once and prints every candidate route
for both legs, with the profit the loop would compute. Never trades.
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for direct execution
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from roundtrip.config.settings import get_settings
from roundtrip.core.types import Route, Token
from roundtrip.exchange.client import JupiterClient, JupiterClientError
from roundtrip.market.tokens import TokenRegistry
from roundtrip.strategy.calculator import evaluate_profit
from roundtrip.strategy.route_filter import RouteFilter
from roundtrip.utils.math import from_atomic, to_atomic


def print_routes(title: str, routes: list[Route], output: Token, route_filter: RouteFilter) -> None:
    """Print candidate routes, marking the ones above the fee ceiling."""
    print(f"  {title}: {len(routes)} candidate(s)")
    for i, route in enumerate(routes, 1):
        flag = "" if route_filter.is_acceptable(route) else "  [fee > ceiling]"
        amount = from_atomic(route.out_amount, output.decimals)
        print(f"    {i}. {route.labels:<40} out={amount:<16} max fee={route.max_fee_pct:.4f}%{flag}")
    print()


async def main() -> int:
    """Quote the round trip once and display the result."""
    print("=" * 60)
    print("  ROUND-TRIP PROBE")
    print("=" * 60)
    print()

    try:
        settings = get_settings()
    except Exception as e:
        print(f"Error loading settings: {e}")
        return 1

    api_key = settings.jupiter_api_key.get_secret_value() if settings.jupiter_api_key else None
    route_filter = RouteFilter(settings.max_fee_pct)

    async with JupiterClient(
        base_url=settings.jupiter_api_url,
        api_key=api_key,
        timeout_seconds=settings.request_timeout_seconds,
        include_direct_routes=settings.include_direct_routes,
    ) as client:
        print("Loading token list...")
        registry = TokenRegistry()
        registry.load(await client.get_token_list(settings.resolved_token_list_url))

        base = registry.get(settings.input_mint_address)
        intermediate = registry.get(settings.output_mint_address)
        if base is None or intermediate is None:
            print("Configured mints are not in the token list")
            return 1

        print(f"Round trip: {base} -> {intermediate} -> {base}, probe {settings.in_amount} {base}")
        print()

        try:
            routes1 = await client.compute_routes(
                base.address,
                intermediate.address,
                to_atomic(settings.in_amount, base.decimals),
                settings.slippage_bps,
            )
        except JupiterClientError as e:
            print(f"Leg 1 quote failed: {e}")
            return 1
        print_routes("Leg 1", routes1, intermediate, route_filter)

        best1 = route_filter.select(routes1)
        if best1 is None:
            print("No leg 1 route under the fee ceiling")
            return 0

        try:
            routes2 = await client.compute_routes(
                intermediate.address,
                base.address,
                best1.out_amount,
                settings.slippage_bps,
            )
        except JupiterClientError as e:
            print(f"Leg 2 quote failed: {e}")
            return 1
        print_routes("Leg 2", routes2, base, route_filter)

        best2 = route_filter.select(routes2)
        if best2 is None:
            print("No leg 2 route under the fee ceiling")
            return 0

        profit = evaluate_profit(
            settings.in_amount,
            from_atomic(best2.out_amount, base.decimals),
            settings.tx_fee,
        )
        verdict = "TRADE" if profit.meets(settings.min_profit) else "skip"

        print("=" * 60)
        print(f"  GROSS: {profit.gross:+.6f} {base}")
        print(f"  NET:   {profit.net:+.6f} {base}  (min {settings.min_profit})  -> {verdict}")
        print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
