"""
Type definitions for the round-trip engine.

This module contains all dataclasses, enums, and Protocol definitions used
throughout the application. Using slots=True for memory efficiency and
faster attribute access.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


# =============================================================================
# Enums
# =============================================================================


class Leg(str, Enum):
    """Which half of the round trip a swap belongs to."""

    OPEN = "OPEN"  # base -> intermediate
    CLOSE = "CLOSE"  # intermediate -> base


class CycleStatus(str, Enum):
    """Outcome of one outer-loop iteration."""

    NO_QUOTE = "NO_QUOTE"
    UNPROFITABLE = "UNPROFITABLE"
    LEG1_FAILED = "LEG1_FAILED"
    COMPLETED = "COMPLETED"
    POSITION_OPEN = "POSITION_OPEN"
    CANCELLED = "CANCELLED"


# =============================================================================
# Token Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class Token:
    """
    Token metadata from the registry.

    Frozen for immutability and hashability.
    """

    symbol: str
    address: str
    decimals: int

    def __str__(self) -> str:
        return self.symbol


# =============================================================================
# Route Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class RouteHop:
    """Single venue hop of an aggregator route."""

    label: str
    amm_key: str
    input_mint: str
    output_mint: str
    fee_pct: float = 0.0


@dataclass(slots=True, frozen=True)
class Route:
    """
    Swap path through one or more liquidity venues.

    Amounts are atomic units. The payload is the aggregator's own
    document and is handed back unchanged when the route is executed.
    A route is consumed once by execution and then discarded.
    """

    input_mint: str
    output_mint: str
    in_amount: int
    out_amount: int
    hops: tuple[RouteHop, ...]
    price_impact_pct: float = 0.0
    slippage_bps: int = 0
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def labels(self) -> str:
        """Venue labels joined in hop order."""
        return " x ".join(hop.label for hop in self.hops) or "unknown"

    @property
    def max_fee_pct(self) -> float:
        """Highest fee charged by any single hop."""
        return max((hop.fee_pct for hop in self.hops), default=0.0)

    @property
    def venue_path(self) -> tuple[str, ...]:
        """Identity of the path, used to de-duplicate candidates."""
        return tuple(hop.amm_key or hop.label for hop in self.hops)


@dataclass(slots=True, frozen=True)
class QuoteResult:
    """
    Result of one quote request.

    Amounts are human units. A missing route means no usable route was
    found; `reason` then says why.
    """

    input_amount: float
    output_amount: float
    route: Route | None = None
    reason: str = ""

    @classmethod
    def unavailable(cls, reason: str, input_amount: float = 0.0) -> "QuoteResult":
        """Build a result that carries no route."""
        return cls(input_amount=input_amount, output_amount=0.0, route=None, reason=reason)

    @property
    def is_usable(self) -> bool:
        """Check if the quote can be executed."""
        return self.route is not None and self.output_amount > 0


# =============================================================================
# Profit Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class ProfitEstimate:
    """Gross and net profit of a round trip, in base token units."""

    input_amount: float
    output_amount: float
    gross: float
    net: float

    @property
    def is_gain(self) -> bool:
        """Check if the round trip returns more than it started with."""
        return self.output_amount > self.input_amount

    def meets(self, threshold: float) -> bool:
        """Check if the trade returns a gain with net profit at or above threshold."""
        return self.is_gain and self.net >= threshold


# =============================================================================
# Execution Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class SwapOutcome:
    """
    Result of executing one route.

    Amounts are atomic units and only present when the executor could
    determine them.
    """

    success: bool
    tx_id: str | None = None
    input_amount: int | None = None
    output_amount: int | None = None
    error: str = ""
    latency_us: int = 0

    @classmethod
    def failed(cls, error: str, latency_us: int = 0) -> "SwapOutcome":
        """Build a failed outcome."""
        return cls(success=False, error=error, latency_us=latency_us)


@dataclass(slots=True)
class CycleReport:
    """Summary of one outer-loop iteration."""

    status: CycleStatus
    profit: ProfitEstimate | None = None
    leg1: SwapOutcome | None = None
    leg2: SwapOutcome | None = None
    leg2_attempts: int = 0
    held_amount: float = 0.0
    delay: float = 0.0

    @property
    def is_success(self) -> bool:
        """Check if a full round trip was executed."""
        return self.status == CycleStatus.COMPLETED


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class RouteProvider(Protocol):
    """Protocol for routing capability implementations."""

    async def compute_routes(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
        force_fetch: bool = True,
    ) -> list[Route]:
        """Return candidate routes ordered best to worst."""
        ...


class SwapExecutor(Protocol):
    """Protocol for execution capability implementations."""

    async def execute(self, route: Route) -> SwapOutcome:
        """Execute a route. Must not raise."""
        ...


class ProfitSink(Protocol):
    """Protocol for the durable profit log."""

    def record(self, profit: ProfitEstimate, tx_ids: tuple[str | None, ...] = ()) -> None:
        """Append one completed round trip."""
        ...
