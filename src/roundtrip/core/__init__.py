"""Core module containing the engine and type definitions."""

from roundtrip.core.types import (
    CycleReport,
    CycleStatus,
    Leg,
    ProfitEstimate,
    QuoteResult,
    Route,
    RouteHop,
    SwapOutcome,
    Token,
)


__all__ = [
    "CycleReport",
    "CycleStatus",
    "Leg",
    "ProfitEstimate",
    "QuoteResult",
    "Route",
    "RouteHop",
    "SwapOutcome",
    "Token",
]
