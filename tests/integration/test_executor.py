"""
Integration tests for swap execution.

Tests the dry-run executor and the live build / sign / submit / confirm
flow with mocked aggregator, RPC and signer.
"""

import logging
from typing import Any

import pytest

from roundtrip.config.constants import SOL_MINT
from roundtrip.core.types import Route, Token
from roundtrip.exchange.client import JupiterAPIError
from roundtrip.exchange.rpc import RpcError
from roundtrip.execution.executor import DryRunSwapExecutor, LiveSwapExecutor
from tests.mocks.aggregator import make_route
from tests.mocks.chain import MockRpc, MockSigner, MockSwapClient


WALLET = "Wallet1111"


def swap_meta(usdc: Token) -> dict[str, Any]:
    """Confirmed transaction metadata for 1 USDC -> 1.02 SOL."""
    return {
        "meta": {
            "err": None,
            "fee": 5_000,
            "preBalances": [10_000_000_000, 2_039_280],
            "postBalances": [11_019_995_000, 2_039_280],
            "preTokenBalances": [
                {
                    "accountIndex": 1,
                    "mint": usdc.address,
                    "owner": WALLET,
                    "uiTokenAmount": {"amount": "5000000", "decimals": 6},
                },
                {
                    "accountIndex": 4,
                    "mint": usdc.address,
                    "owner": "PoolVault111",
                    "uiTokenAmount": {"amount": "900000000", "decimals": 6},
                },
            ],
            "postTokenBalances": [
                {
                    "accountIndex": 1,
                    "mint": usdc.address,
                    "owner": WALLET,
                    "uiTokenAmount": {"amount": "4000000", "decimals": 6},
                },
                {
                    "accountIndex": 4,
                    "mint": usdc.address,
                    "owner": "PoolVault111",
                    "uiTokenAmount": {"amount": "901000000", "decimals": 6},
                },
            ],
        }
    }


class TestDryRunSwapExecutor:
    """Tests for DryRunSwapExecutor."""

    @pytest.mark.asyncio
    async def test_fills_at_quote(self, usdc: Token, sol: Token) -> None:
        """Test that a simulated swap fills at exactly the quoted amounts."""
        executor = DryRunSwapExecutor()
        route = make_route(usdc.address, sol.address, 1_000_000, 1_020_000_000)

        outcome = await executor.execute(route)

        assert outcome.success
        assert outcome.tx_id is not None
        assert outcome.tx_id.startswith("DRY_")
        assert outcome.input_amount == 1_000_000
        assert outcome.output_amount == 1_020_000_000
        assert executor.stats == {"total": 1, "successful": 1, "failed": 0}
        assert executor.success_rate == 1.0


class TestLiveSwapExecutor:
    """Tests for LiveSwapExecutor."""

    @pytest.fixture
    def route(self, usdc: Token) -> Route:
        """Opening-leg route into native SOL."""
        return make_route(usdc.address, SOL_MINT, 1_000_000, 1_020_000_000)

    @staticmethod
    def build(
        client: MockSwapClient,
        rpc: MockRpc,
        signer: MockSigner | None = None,
        confirm_timeout: float = 1.0,
    ) -> LiveSwapExecutor:
        return LiveSwapExecutor(
            client=client,  # type: ignore[arg-type]
            rpc=rpc,  # type: ignore[arg-type]
            signer=signer or MockSigner(public_key=WALLET),  # type: ignore[arg-type]
            confirm_timeout=confirm_timeout,
            poll_interval=0.01,
        )

    @pytest.mark.asyncio
    async def test_confirmed_swap(self, route: Route, usdc: Token) -> None:
        """Test the full flow and realized amounts from balance changes."""
        client = MockSwapClient()
        rpc = MockRpc(
            statuses=[
                None,
                {"confirmationStatus": "processed", "err": None},
                {"confirmationStatus": "confirmed", "err": None},
            ],
            transaction=swap_meta(usdc),
        )
        signer = MockSigner(public_key=WALLET, signature="SIG1")
        executor = self.build(client, rpc, signer)

        outcome = await executor.execute(route)

        assert outcome.success
        assert outcome.tx_id == "SIG1"
        assert outcome.input_amount == 1_000_000
        assert outcome.output_amount == 1_020_000_000
        assert client.requests == [(route, WALLET)]
        assert signer.signed == ["UNSIGNED"]
        assert rpc.sent == ["SIGNED:UNSIGNED"]

    @pytest.mark.asyncio
    async def test_failed_on_chain(self, route: Route) -> None:
        """Test that a transaction error fails the swap."""
        error = {"InstructionError": [2, "Custom"]}
        rpc = MockRpc(statuses=[{"confirmationStatus": "confirmed", "err": error}])
        executor = self.build(MockSwapClient(), rpc)

        outcome = await executor.execute(route)

        assert not outcome.success
        assert outcome.tx_id == "SIG1"
        assert "failed on chain" in outcome.error
        assert executor.stats["failed"] == 1

    @pytest.mark.asyncio
    async def test_confirmation_timeout(self, route: Route) -> None:
        """Test that a transaction that never lands fails the swap."""
        rpc = MockRpc(statuses=[None])
        executor = self.build(MockSwapClient(), rpc, confirm_timeout=0.05)

        outcome = await executor.execute(route)

        assert not outcome.success
        assert "not confirmed" in outcome.error

    @pytest.mark.asyncio
    async def test_timeout_warns_with_signature(
        self, route: Route, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that an unconfirmed swap is logged by signature as possibly landed."""
        rpc = MockRpc(statuses=[None])
        executor = self.build(MockSwapClient(), rpc, confirm_timeout=0.05)

        with caplog.at_level(logging.WARNING, logger="roundtrip.execution.executor"):
            outcome = await executor.execute(route)

        assert outcome.tx_id == "SIG1"
        warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert any("SIG1" in message and "may still land" in message for message in warnings)

    @pytest.mark.asyncio
    async def test_late_confirmation_succeeds(self, route: Route, usdc: Token) -> None:
        """Test that a swap confirmed at the deadline is still a success."""
        rpc = MockRpc(transaction=swap_meta(usdc))
        executor = self.build(MockSwapClient(), rpc, confirm_timeout=0.0)

        outcome = await executor.execute(route)

        assert outcome.success
        assert outcome.tx_id == "SIG1"

    @pytest.mark.asyncio
    async def test_swap_request_error(self, route: Route) -> None:
        """Test that an aggregator error is reported, not raised."""
        client = MockSwapClient(error=JupiterAPIError("API error 429: rate limited", code=429))
        rpc = MockRpc()
        executor = self.build(client, rpc)

        outcome = await executor.execute(route)

        assert not outcome.success
        assert outcome.tx_id is None
        assert "429" in outcome.error
        assert rpc.sent == []

    @pytest.mark.asyncio
    async def test_unreadable_transaction(self, route: Route) -> None:
        """Test that a landed swap with unreadable details still succeeds."""
        rpc = MockRpc(transaction_error=RpcError("node behind"))
        executor = self.build(MockSwapClient(), rpc)

        outcome = await executor.execute(route)

        assert outcome.success
        assert outcome.input_amount is None
        assert outcome.output_amount is None

    @pytest.mark.asyncio
    async def test_closing_leg_amounts(self, usdc: Token) -> None:
        """Test realized amounts when selling SOL back into a token."""
        route = make_route(SOL_MINT, usdc.address, 1_020_000_000, 1_035_000)
        meta = {
            "meta": {
                "fee": 5_000,
                "preBalances": [11_020_000_000],
                "postBalances": [9_999_995_000],
                "preTokenBalances": [],
                "postTokenBalances": [
                    {
                        "mint": usdc.address,
                        "owner": WALLET,
                        "uiTokenAmount": {"amount": "1035000", "decimals": 6},
                    }
                ],
            }
        }
        executor = self.build(MockSwapClient(), MockRpc(transaction=meta))

        outcome = await executor.execute(route)

        assert outcome.success
        assert outcome.input_amount == 1_020_000_000
        assert outcome.output_amount == 1_035_000
