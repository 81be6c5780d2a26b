"""
Main round-trip engine orchestrator.

Builds every component from settings, runs the controller until a
shutdown signal arrives and tears everything down again.
"""

import asyncio
import logging
import signal
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from roundtrip.config.settings import Settings
from roundtrip.core.types import Token
from roundtrip.exchange.client import JupiterClient
from roundtrip.exchange.rate_limiter import RateLimiter
from roundtrip.exchange.rpc import SolanaRpcClient
from roundtrip.execution.controller import ControllerConfig, RoundTripController
from roundtrip.execution.executor import DryRunSwapExecutor, LiveSwapExecutor
from roundtrip.execution.signer import WalletSigner
from roundtrip.market.quotes import QuoteService
from roundtrip.market.tokens import TokenRegistry
from roundtrip.strategy.calculator import ProfitCalculator
from roundtrip.strategy.route_filter import RouteFilter
from roundtrip.telemetry.ledger import ProfitLedger
from roundtrip.telemetry.logger import AsyncLogger, setup_logging
from roundtrip.telemetry.metrics import MetricsCollector
from roundtrip.telemetry.reporter import StatusReporter


logger = logging.getLogger(__name__)


class RoundTripEngine:
    """
    Main engine orchestrator.

    Manages the lifecycle of:
    - Aggregator and RPC connectivity
    - Token registry
    - Quote service and swap executor
    - The round-trip controller
    - Telemetry and reporting
    """

    def __init__(self, settings: Settings) -> None:
        """
        Initialize the engine.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._running = False
        self._shutdown_event = asyncio.Event()

        # Components (initialized in setup)
        self._client: JupiterClient | None = None
        self._rpc: SolanaRpcClient | None = None
        self._registry = TokenRegistry()
        self._executor: DryRunSwapExecutor | LiveSwapExecutor | None = None
        self._controller: RoundTripController | None = None

        # Infrastructure
        self._metrics = MetricsCollector()
        self._ledger = ProfitLedger(settings.profit_log_path)
        self._reporter: StatusReporter | None = None
        self._async_logger: AsyncLogger | None = None
        self._closed = False

    async def setup(self) -> None:
        """
        Initialize all components.

        Raises:
            Exception: Any failure here is fatal; the process exits.
        """
        settings = self._settings

        self._async_logger = setup_logging(level=settings.log_level, log_file=settings.log_file)
        logger.info("Initializing round-trip engine...")

        api_key = settings.jupiter_api_key.get_secret_value() if settings.jupiter_api_key else None
        self._client = JupiterClient(
            base_url=settings.jupiter_api_url,
            api_key=api_key,
            timeout_seconds=settings.request_timeout_seconds,
            include_direct_routes=settings.include_direct_routes,
            rate_limiter=RateLimiter(quotes_per_second=settings.quote_requests_per_second),
        )

        # Token registry
        token_list_url = settings.resolved_token_list_url
        logger.info(f"Loading token list from {token_list_url}")
        entries = await self._client.get_token_list(token_list_url)
        count = self._registry.load(entries)
        logger.info(f"Loaded {count} tokens")

        base = self._lookup(settings.input_mint_address, "input")
        intermediate = self._lookup(settings.output_mint_address, "output")

        # Executor
        if settings.dry_run:
            self._executor = DryRunSwapExecutor()
        else:
            if settings.wallet_private_key is None:
                raise RuntimeError("WALLET_PRIVATE_KEY is required for live trading")
            signer = WalletSigner.from_secret(settings.wallet_private_key.get_secret_value())
            self._rpc = SolanaRpcClient(
                settings.rpc_endpoint,
                timeout_seconds=settings.request_timeout_seconds,
            )
            await self._rpc.call("getHealth")
            self._executor = LiveSwapExecutor(
                client=self._client,
                rpc=self._rpc,
                signer=signer,
                confirm_timeout=settings.confirm_timeout_seconds,
                poll_interval=settings.confirm_poll_interval_seconds,
            )
            logger.info(f"Wallet: {signer.public_key}")

        quotes = QuoteService(
            provider=self._client,
            route_filter=RouteFilter(settings.max_fee_pct),
            slippage_bps=settings.slippage_bps,
            metrics=self._metrics,
        )

        self._ledger.start()
        self._controller = RoundTripController(
            quotes=quotes,
            executor=self._executor,
            calculator=ProfitCalculator(settings.tx_fee),
            base_token=base,
            intermediate_token=intermediate,
            config=ControllerConfig.from_settings(settings),
            profit_sink=self._ledger,
            metrics=self._metrics,
            stop_event=self._shutdown_event,
        )

        self._reporter = StatusReporter(
            metrics=self._metrics,
            base_symbol=base.symbol if base else "",
            dry_run=settings.dry_run,
        )

        logger.info("Engine initialization complete")

    def _lookup(self, address: str, role: str) -> Token | None:
        """Resolve a configured mint; a missing one leaves the loop idling."""
        token = self._registry.get(address)
        if token is None:
            logger.error(
                f"Configured {role} token {address} is not in the token list; "
                f"no round trips will be quoted"
            )
        else:
            logger.info(f"{role.capitalize()} token: {token.symbol} ({token.decimals} decimals)")
        return token

    async def run(self) -> None:
        """Run the round-trip loop until shutdown."""
        if self._controller is None:
            raise RuntimeError("Engine is not set up")

        self._running = True

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._handle_shutdown)

        try:
            if self._reporter:
                self._reporter.start(interval=self._settings.status_interval_seconds)

            await self._controller.run()

        except Exception as e:
            logger.error(f"Engine error: {e}")
            raise

        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            self._running = False

    def _handle_shutdown(self) -> None:
        """Handle shutdown signal."""
        logger.info("Shutdown signal received")
        self._shutdown_event.set()

    async def shutdown(self) -> None:
        """Gracefully shut down the engine."""
        if self._closed:
            return
        self._closed = True

        logger.info("Shutting down engine...")
        self._shutdown_event.set()
        self._running = False

        if self._reporter:
            await self._reporter.stop()
            self._reporter.print_summary()

        if self._executor is not None:
            logger.info(f"Executor stats: {self._executor.stats}")

        self._ledger.stop()

        if self._rpc:
            await self._rpc.close()

        if self._client:
            await self._client.close()

        logger.info("Engine shutdown complete")

        if self._async_logger:
            self._async_logger.stop()

    @property
    def is_running(self) -> bool:
        """Check if engine is running."""
        return self._running

    @property
    def metrics(self) -> MetricsCollector:
        """Get metrics collector."""
        return self._metrics


@asynccontextmanager
async def create_engine(settings: Settings) -> AsyncIterator[RoundTripEngine]:
    """
    Create and manage engine lifecycle.

    Usage:
        async with create_engine(settings) as engine:
            await engine.run()
    """
    engine = RoundTripEngine(settings)

    try:
        await engine.setup()
        yield engine
    finally:
        await engine.shutdown()
