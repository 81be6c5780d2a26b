"""
Trading constants and configuration values.

This module contains all hardcoded values used throughout the round-trip
engine. Values are organized by category for easy maintenance and auditing.
"""

from typing import Final


# =============================================================================
# Jupiter API Endpoints
# =============================================================================

JUPITER_API_URL: Final[str] = "https://quote-api.jup.ag/v6"

ENDPOINT_QUOTE: Final[str] = "/quote"
ENDPOINT_SWAP: Final[str] = "/swap"

# Token registries per cluster
TOKEN_LIST_URLS: Final[dict[str, str]] = {
    "mainnet-beta": "https://cache.jup.ag/tokens",
    "devnet": "https://api.jup.ag/api/tokens/devnet",
    "testnet": "https://api.jup.ag/api/tokens/testnet",
}

# Aggregator error codes meaning "no route for this pair/amount"
NO_ROUTE_ERROR_CODES: Final[frozenset[str]] = frozenset(
    {
        "COULD_NOT_FIND_ANY_ROUTE",
        "NO_ROUTES_FOUND",
        "TOKEN_NOT_TRADABLE",
    }
)


# =============================================================================
# Solana RPC
# =============================================================================

SOLANA_RPC_URLS: Final[dict[str, str]] = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
}

SOL_MINT: Final[str] = "So11111111111111111111111111111111111111112"
USDC_MINT: Final[str] = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

# Commitment levels treated as "landed"
CONFIRMED_STATUSES: Final[frozenset[str]] = frozenset({"confirmed", "finalized"})


# =============================================================================
# Trading Constraints
# =============================================================================

DEFAULT_IN_AMOUNT: Final[float] = 1.0
DEFAULT_SLIPPAGE_BPS: Final[int] = 100

# Per-hop venue fee ceiling, in percent of the hop amount
DEFAULT_MAX_FEE_PCT: Final[float] = 0.5

# Fixed cost of one round trip, in base token units
DEFAULT_TX_FEE: Final[float] = 0.001

# Net profit required to open a position / to close one on retry
DEFAULT_MIN_PROFIT: Final[float] = 0.002
DEFAULT_MIN_PROFIT_RETRY: Final[float] = 0.0


# =============================================================================
# Retry & Backoff
# =============================================================================

DEFAULT_LEG1_RETRY_DELAY: Final[float] = 5.0  # seconds
DEFAULT_LEG2_RETRY_DELAY: Final[float] = 1.0  # seconds
DEFAULT_LEG2_RETRY_RESET_COUNT: Final[int] = 10

# Pause between the two leg quotes of one cycle
DEFAULT_QUOTE_SPACING: Final[float] = 0.05  # seconds


# =============================================================================
# Network
# =============================================================================

DEFAULT_REQUEST_TIMEOUT: Final[float] = 8.0  # seconds
DEFAULT_QUOTE_REQUESTS_PER_SECOND: Final[int] = 10
DEFAULT_SWAP_REQUESTS_PER_SECOND: Final[int] = 2

# Identical quote requests within this window are served from memory
QUOTE_CACHE_TTL: Final[float] = 2.0  # seconds
QUOTE_CACHE_MAX_ENTRIES: Final[int] = 256

DEFAULT_CONFIRM_TIMEOUT: Final[float] = 45.0  # seconds
DEFAULT_CONFIRM_POLL_INTERVAL: Final[float] = 1.0  # seconds


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

LEDGER_FORMAT: Final[str] = "%(asctime)s | %(message)s"
DEFAULT_PROFIT_LOG_PATH: Final[str] = "roundtrip_profits.log"

# Status line interval (seconds)
DEFAULT_STATUS_INTERVAL: Final[float] = 60.0

# Maximum log queue size
MAX_LOG_QUEUE_SIZE: Final[int] = 10_000
