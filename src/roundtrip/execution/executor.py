"""
Swap execution.

Executes a single route and reports the outcome as a SwapOutcome. The
executors never raise: every failure, from the swap request to an
on-chain error, is returned as a failed outcome.
"""

import asyncio
import logging
from typing import Any

from roundtrip.config.constants import (
    CONFIRMED_STATUSES,
    DEFAULT_CONFIRM_POLL_INTERVAL,
    DEFAULT_CONFIRM_TIMEOUT,
    SOL_MINT,
)
from roundtrip.core.types import Route, SwapOutcome
from roundtrip.exchange.client import JupiterClient
from roundtrip.exchange.rpc import SolanaRpcClient
from roundtrip.execution.signer import WalletSigner
from roundtrip.utils.time import LatencyTimer, get_timestamp_us, monotonic_s


logger = logging.getLogger(__name__)


class SwapExecutionError(Exception):
    """A submitted swap did not land."""

    def __init__(self, message: str, tx_id: str | None = None) -> None:
        super().__init__(message)
        self.tx_id = tx_id


class _ExecutionStats:
    """Shared success / failure counters."""

    def __init__(self) -> None:
        self._total_executions = 0
        self._successful_executions = 0
        self._failed_executions = 0

    def _count(self, outcome: SwapOutcome) -> SwapOutcome:
        self._total_executions += 1
        if outcome.success:
            self._successful_executions += 1
        else:
            self._failed_executions += 1
        return outcome

    @property
    def stats(self) -> dict[str, int]:
        """Get execution statistics."""
        return {
            "total": self._total_executions,
            "successful": self._successful_executions,
            "failed": self._failed_executions,
        }

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        if self._total_executions == 0:
            return 0.0
        return self._successful_executions / self._total_executions


class DryRunSwapExecutor(_ExecutionStats):
    """
    Simulates swaps without touching the chain.

    Every route fills at exactly its quoted amounts.
    """

    async def execute(self, route: Route) -> SwapOutcome:
        """Simulate a fill of the route."""
        start = get_timestamp_us()

        # Yield like a real submission would
        await asyncio.sleep(0)

        tx_id = f"DRY_{start}"
        logger.info(
            f"[DRY RUN] Swap {route.in_amount} -> {route.out_amount} via {route.labels} ({tx_id})"
        )
        return self._count(
            SwapOutcome(
                success=True,
                tx_id=tx_id,
                input_amount=route.in_amount,
                output_amount=route.out_amount,
                latency_us=get_timestamp_us() - start,
            )
        )


class LiveSwapExecutor(_ExecutionStats):
    """
    Executes routes on chain.

    Flow per route:
    1. Request the swap transaction from the aggregator
    2. Sign it with the wallet key
    3. Submit through RPC and poll until confirmed, failed or timed out
    4. Read realized amounts from the confirmed transaction
    """

    def __init__(
        self,
        client: JupiterClient,
        rpc: SolanaRpcClient,
        signer: WalletSigner,
        confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
        poll_interval: float = DEFAULT_CONFIRM_POLL_INTERVAL,
    ) -> None:
        """
        Initialize executor.

        Args:
            client: Aggregator client building swap transactions.
            rpc: Solana RPC client.
            signer: Wallet signer.
            confirm_timeout: Seconds to wait for confirmation.
            poll_interval: Seconds between status polls.
        """
        super().__init__()
        self._client = client
        self._rpc = rpc
        self._signer = signer
        self._confirm_timeout = confirm_timeout
        self._poll_interval = poll_interval

    async def execute(self, route: Route) -> SwapOutcome:
        """
        Execute a route.

        Args:
            route: Route to execute; consumed by this call.

        Returns:
            SwapOutcome, failed on any error.
        """
        tx_id: str | None = None
        input_amount: int | None = None
        output_amount: int | None = None
        error = ""

        with LatencyTimer() as timer:
            try:
                swap = await self._client.get_swap_transaction(route, self._signer.public_key)
                signed_tx, tx_id = self._signer.sign_serialized(swap.swap_transaction)
                await self._rpc.send_transaction(signed_tx)
                logger.info(f"Submitted swap {tx_id} via {route.labels}")

                await self._await_confirmation(tx_id)
                input_amount, output_amount = await self._realized_amounts(tx_id, route)
            except Exception as e:
                logger.error(f"Swap via {route.labels} failed: {e}")
                error = str(e) or type(e).__name__

        logger.debug(f"Swap {tx_id} finished in {timer.latency_us}μs")
        return self._count(
            SwapOutcome(
                success=not error,
                tx_id=tx_id,
                input_amount=input_amount,
                output_amount=output_amount,
                error=error,
                latency_us=timer.latency_us,
            )
        )

    async def _await_confirmation(self, tx_id: str) -> None:
        """Poll the signature until it lands, fails or times out."""
        deadline = monotonic_s() + self._confirm_timeout

        while monotonic_s() < deadline:
            if self._is_confirmed(await self._rpc.get_signature_status(tx_id), tx_id):
                return
            await asyncio.sleep(self._poll_interval)

        # Last look before giving up; a late landing still counts.
        if self._is_confirmed(await self._rpc.get_signature_status(tx_id), tx_id):
            logger.info(f"Swap {tx_id} confirmed after the polling deadline")
            return

        logger.warning(
            f"Swap {tx_id} unconfirmed after {self._confirm_timeout:.0f}s and may still land, "
            f"check the wallet before trusting the reported failure"
        )
        raise SwapExecutionError(
            f"Transaction not confirmed within {self._confirm_timeout:.0f}s", tx_id
        )

    @staticmethod
    def _is_confirmed(status: dict[str, Any] | None, tx_id: str) -> bool:
        """Check one status answer; an on-chain error raises."""
        if status is None:
            return False
        if status.get("err"):
            raise SwapExecutionError(f"Transaction failed on chain: {status['err']}", tx_id)
        return status.get("confirmationStatus") in CONFIRMED_STATUSES

    async def _realized_amounts(self, tx_id: str, route: Route) -> tuple[int | None, int | None]:
        """
        Read what the swap actually spent and received.

        A failure here does not fail the swap; the amounts are then unknown.
        """
        try:
            tx = await self._rpc.get_transaction(tx_id)
        except Exception as e:
            logger.warning(f"Could not read transaction {tx_id}: {e}")
            return None, None

        if tx is None or not isinstance(tx.get("meta"), dict):
            logger.warning(f"Transaction {tx_id} has no metadata")
            return None, None

        meta = tx["meta"]
        owner = self._signer.public_key
        spent = _balance_delta(meta, owner, route.input_mint)
        received = _balance_delta(meta, owner, route.output_mint)

        return (
            -spent if spent is not None and spent < 0 else None,
            received if received is not None and received > 0 else None,
        )


def _balance_delta(meta: dict[str, Any], owner: str, mint: str) -> int | None:
    """Change of the owner's balance of mint within one transaction, atomic units."""
    if mint == SOL_MINT:
        pre = meta.get("preBalances") or []
        post = meta.get("postBalances") or []
        if not pre or not post:
            return None
        # The fee payer is account 0; the network fee is not part of the swap.
        return int(post[0]) - int(pre[0]) + int(meta.get("fee", 0))

    def total(key: str) -> int | None:
        found = False
        amount = 0
        for entry in meta.get(key) or []:
            if entry.get("owner") == owner and entry.get("mint") == mint:
                found = True
                amount += int(entry.get("uiTokenAmount", {}).get("amount", 0))
        return amount if found else None

    pre_total = total("preTokenBalances")
    post_total = total("postTokenBalances")
    if pre_total is None and post_total is None:
        return None
    return (post_total or 0) - (pre_total or 0)
