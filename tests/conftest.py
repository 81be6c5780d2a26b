"""
Pytest configuration and shared fixtures.

This module provides common fixtures used across unit and integration tests.
"""

from collections.abc import Iterator
from pathlib import Path

import pytest

from roundtrip.core.types import Token
from roundtrip.strategy.calculator import ProfitCalculator
from roundtrip.strategy.route_filter import RouteFilter
from roundtrip.telemetry.ledger import ProfitLedger
from roundtrip.telemetry.metrics import MetricsCollector


USDC_ADDRESS = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SOL_ADDRESS = "So11111111111111111111111111111111111111112"


# =============================================================================
# Token Fixtures
# =============================================================================


@pytest.fixture
def usdc() -> Token:
    """USDC, the base token (6 decimals)."""
    return Token(symbol="USDC", address=USDC_ADDRESS, decimals=6)


@pytest.fixture
def sol() -> Token:
    """SOL, the intermediate token (9 decimals)."""
    return Token(symbol="SOL", address=SOL_ADDRESS, decimals=9)


@pytest.fixture
def token_list() -> list[dict[str, object]]:
    """Raw token list entries as published by the registry."""
    return [
        {"address": USDC_ADDRESS, "symbol": "USDC", "decimals": 6, "name": "USD Coin"},
        {"address": SOL_ADDRESS, "symbol": "SOL", "decimals": 9, "name": "Wrapped SOL"},
    ]


# =============================================================================
# Strategy Fixtures
# =============================================================================


@pytest.fixture
def calculator() -> ProfitCalculator:
    """Profit calculator with a 0.01 round-trip fee."""
    return ProfitCalculator(fee=0.01)


@pytest.fixture
def route_filter() -> RouteFilter:
    """Route filter with a 0.5% per-hop ceiling."""
    return RouteFilter(max_fee_pct=0.5)


# =============================================================================
# Telemetry Fixtures
# =============================================================================


@pytest.fixture
def metrics() -> MetricsCollector:
    """Fresh metrics collector."""
    return MetricsCollector()


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    """Profit ledger location inside a temporary directory."""
    return tmp_path / "logs" / "profits.log"


@pytest.fixture
def ledger(ledger_path: Path) -> Iterator[ProfitLedger]:
    """Started profit ledger, stopped after the test."""
    profit_ledger = ProfitLedger(ledger_path)
    profit_ledger.start()
    yield profit_ledger
    profit_ledger.stop()
