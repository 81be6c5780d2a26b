"""
Unit tests for aggregator response models.
"""

import pytest
from pydantic import ValidationError

from roundtrip.exchange.models import ErrorResponse, QuoteResponse, SwapInfo, SwapResponse, TokenEntry


USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SOL = "So11111111111111111111111111111111111111112"
BONK = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


def quote_document() -> dict[str, object]:
    """Two-hop quote as returned by the quote endpoint."""
    return {
        "inputMint": USDC,
        "inAmount": "1000000",
        "outputMint": SOL,
        "outAmount": "1020000000",
        "otherAmountThreshold": "1014900000",
        "swapMode": "ExactIn",
        "slippageBps": 50,
        "priceImpactPct": "0.0012",
        "routePlan": [
            {
                "swapInfo": {
                    "ammKey": "amm-1",
                    "label": "Orca",
                    "inputMint": USDC,
                    "outputMint": BONK,
                    "inAmount": "1000000",
                    "outAmount": "50000000",
                    "feeAmount": "1000",
                    "feeMint": USDC,
                },
                "percent": 100,
            },
            {
                "swapInfo": {
                    "ammKey": "amm-2",
                    "label": "Raydium",
                    "inputMint": BONK,
                    "outputMint": SOL,
                    "inAmount": "50000000",
                    "outAmount": "1020000000",
                    "feeAmount": "2550000",
                    "feeMint": SOL,
                },
                "percent": 100,
            },
        ],
        "contextSlot": 123456,
    }


class TestSwapInfo:
    """Tests for hop fee calculation."""

    def test_fee_in_input_mint(self) -> None:
        """Test a fee charged on the hop input."""
        info = SwapInfo.model_validate(quote_document()["routePlan"][0]["swapInfo"])  # type: ignore[index]

        assert info.fee_pct == pytest.approx(0.1)

    def test_fee_in_output_mint(self) -> None:
        """Test a fee charged on the hop output."""
        info = SwapInfo.model_validate(quote_document()["routePlan"][1]["swapInfo"])  # type: ignore[index]

        assert info.fee_pct == pytest.approx(0.25)

    def test_missing_fee(self) -> None:
        """Test that an unreported fee counts as zero."""
        info = SwapInfo(
            input_mint=USDC, output_mint=SOL, in_amount=1_000_000, out_amount=5_000_000
        )

        assert info.fee_pct == 0.0
        assert info.to_hop().label == "unknown"

    def test_zero_amount_fee(self) -> None:
        """Test that a zero base amount does not divide by zero."""
        info = SwapInfo(
            input_mint=USDC, output_mint=SOL, in_amount=0, out_amount=0, fee_amount=10
        )

        assert info.fee_pct == 0.0


class TestQuoteResponse:
    """Tests for quote parsing."""

    def test_parse_amount_strings(self) -> None:
        """Test that atomic amounts arrive as strings and parse to int."""
        quote = QuoteResponse.model_validate(quote_document())

        assert quote.in_amount == 1_000_000
        assert quote.out_amount == 1_020_000_000
        assert quote.price_impact_pct == pytest.approx(0.0012)
        assert len(quote.route_plan) == 2

    def test_to_route(self) -> None:
        """Test conversion to the domain route."""
        document = quote_document()

        route = QuoteResponse.model_validate(document).to_route(document)

        assert route.input_mint == USDC
        assert route.output_mint == SOL
        assert route.out_amount == 1_020_000_000
        assert route.labels == "Orca x Raydium"
        assert route.venue_path == ("amm-1", "amm-2")
        assert route.max_fee_pct == pytest.approx(0.25)
        assert route.payload is document

    def test_missing_required_field(self) -> None:
        """Test that a malformed quote is rejected."""
        document = quote_document()
        del document["outAmount"]

        with pytest.raises(ValidationError):
            QuoteResponse.model_validate(document)


class TestOtherModels:
    """Tests for swap, error and token list models."""

    def test_swap_response(self) -> None:
        """Test swap transaction parsing."""
        swap = SwapResponse.model_validate(
            {"swapTransaction": "AQAB", "lastValidBlockHeight": 279632475}
        )

        assert swap.swap_transaction == "AQAB"
        assert swap.last_valid_block_height == 279632475
        assert swap.prioritization_fee_lamports is None

    def test_error_response(self) -> None:
        """Test error document parsing."""
        error = ErrorResponse.model_validate(
            {"error": "Could not find any route", "errorCode": "COULD_NOT_FIND_ANY_ROUTE"}
        )

        assert error.error_code == "COULD_NOT_FIND_ANY_ROUTE"

    def test_error_response_lenient_shapes(self) -> None:
        """Test numeric codes and nested messages from gateways."""
        numeric = ErrorResponse.model_validate({"error": "Too many requests", "errorCode": 429})
        nested = ErrorResponse.model_validate({"error": {"message": "boom"}, "errorCode": None})

        assert numeric.error_code == "429"
        assert nested.error == "boom"
        assert nested.error_code is None

    def test_token_entry(self) -> None:
        """Test token list entry parsing."""
        entry = TokenEntry.model_validate(
            {"address": SOL, "symbol": "SOL", "decimals": 9, "tags": ["verified"]}
        )

        assert entry.decimals == 9
        assert entry.name == ""

    def test_token_entry_bad_decimals(self) -> None:
        """Test that impossible decimals are rejected."""
        with pytest.raises(ValidationError):
            TokenEntry.model_validate({"address": SOL, "symbol": "SOL", "decimals": -1})
