"""
Pydantic models for Jupiter API responses.

These models provide type-safe parsing of aggregator responses. Atomic
amounts arrive as decimal strings and are parsed to int.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from roundtrip.core.types import Route, RouteHop
from roundtrip.utils.math import safe_divide


class SwapInfo(BaseModel):
    """Venue hop inside a route plan step."""

    amm_key: str = Field(default="", alias="ammKey")
    label: str = "unknown"
    input_mint: str = Field(alias="inputMint")
    output_mint: str = Field(alias="outputMint")
    in_amount: int = Field(alias="inAmount")
    out_amount: int = Field(alias="outAmount")
    fee_amount: int = Field(default=0, alias="feeAmount")
    fee_mint: str = Field(default="", alias="feeMint")

    model_config = {"populate_by_name": True}

    @property
    def fee_pct(self) -> float:
        """Fee as a percentage of the hop amount in the fee's own mint."""
        base = self.out_amount if self.fee_mint == self.output_mint else self.in_amount
        return safe_divide(float(self.fee_amount), float(base)) * 100.0

    def to_hop(self) -> RouteHop:
        """Convert to the domain hop type."""
        return RouteHop(
            label=self.label or "unknown",
            amm_key=self.amm_key,
            input_mint=self.input_mint,
            output_mint=self.output_mint,
            fee_pct=self.fee_pct,
        )


class RoutePlanStep(BaseModel):
    """One step of the route plan."""

    swap_info: SwapInfo = Field(alias="swapInfo")
    percent: int = 100

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    """Quote response for one route."""

    input_mint: str = Field(alias="inputMint")
    output_mint: str = Field(alias="outputMint")
    in_amount: int = Field(alias="inAmount")
    out_amount: int = Field(alias="outAmount")
    other_amount_threshold: int = Field(default=0, alias="otherAmountThreshold")
    swap_mode: str = Field(default="ExactIn", alias="swapMode")
    slippage_bps: int = Field(default=0, alias="slippageBps")
    price_impact_pct: float = Field(default=0.0, alias="priceImpactPct")
    route_plan: list[RoutePlanStep] = Field(default_factory=list, alias="routePlan")
    context_slot: int | None = Field(default=None, alias="contextSlot")

    model_config = {"populate_by_name": True}

    def to_route(self, payload: dict[str, Any]) -> Route:
        """
        Convert to the domain route type.

        Args:
            payload: The raw response document, kept for the swap request.

        Returns:
            Route with one hop per route plan step.
        """
        return Route(
            input_mint=self.input_mint,
            output_mint=self.output_mint,
            in_amount=self.in_amount,
            out_amount=self.out_amount,
            hops=tuple(step.swap_info.to_hop() for step in self.route_plan),
            price_impact_pct=self.price_impact_pct,
            slippage_bps=self.slippage_bps,
            payload=payload,
        )


class SwapResponse(BaseModel):
    """Serialized swap transaction ready to be signed."""

    swap_transaction: str = Field(alias="swapTransaction")
    last_valid_block_height: int | None = Field(default=None, alias="lastValidBlockHeight")
    prioritization_fee_lamports: int | None = Field(
        default=None, alias="prioritizationFeeLamports"
    )

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Error document returned with non-2xx responses."""

    error: str = ""
    error_code: str | None = Field(default=None, alias="errorCode")

    model_config = {"populate_by_name": True}

    @field_validator("error", mode="before")
    @classmethod
    def coerce_error(cls, v: Any) -> str:
        """Accept gateway errors nested as {"message": ...} or non-string values."""
        if v is None:
            return ""
        if isinstance(v, dict):
            return str(v.get("message") or v)
        return str(v)

    @field_validator("error_code", mode="before")
    @classmethod
    def coerce_error_code(cls, v: Any) -> str | None:
        """Numeric codes are kept as their string form."""
        return None if v is None else str(v)


class TokenEntry(BaseModel):
    """Token list entry."""

    address: str
    symbol: str
    decimals: int = Field(ge=0, le=255)
    name: str = ""

    model_config = {"populate_by_name": True}
