"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation. Settings are static for the
lifetime of the process.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from roundtrip.config.constants import (
    DEFAULT_CONFIRM_POLL_INTERVAL,
    DEFAULT_CONFIRM_TIMEOUT,
    DEFAULT_IN_AMOUNT,
    DEFAULT_LEG1_RETRY_DELAY,
    DEFAULT_LEG2_RETRY_DELAY,
    DEFAULT_LEG2_RETRY_RESET_COUNT,
    DEFAULT_MAX_FEE_PCT,
    DEFAULT_MIN_PROFIT,
    DEFAULT_MIN_PROFIT_RETRY,
    DEFAULT_PROFIT_LOG_PATH,
    DEFAULT_QUOTE_REQUESTS_PER_SECOND,
    DEFAULT_QUOTE_SPACING,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SLIPPAGE_BPS,
    DEFAULT_STATUS_INTERVAL,
    DEFAULT_TX_FEE,
    JUPITER_API_URL,
    SOL_MINT,
    SOLANA_RPC_URLS,
    TOKEN_LIST_URLS,
    USDC_MINT,
)


Cluster = Literal["mainnet-beta", "devnet", "testnet"]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Sensitive values use SecretStr for safe handling.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Network Configuration
    # =========================================================================

    cluster: Cluster = Field(
        default="mainnet-beta",
        description="Solana cluster the wallet and token list belong to",
    )

    solana_rpc_endpoint: str | None = Field(
        default=None,
        description="Solana JSON-RPC endpoint (defaults to the public cluster endpoint)",
    )

    jupiter_api_url: str = Field(
        default=JUPITER_API_URL,
        description="Base URL of the Jupiter swap API",
    )

    jupiter_api_key: SecretStr | None = Field(
        default=None,
        description="Optional Jupiter API key sent as x-api-key",
    )

    token_list_url: str | None = Field(
        default=None,
        description="Token registry URL (defaults to the cluster's Jupiter token list)",
    )

    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0.0,
        le=60.0,
        description="Total timeout for one HTTP request",
    )

    quote_requests_per_second: int = Field(
        default=DEFAULT_QUOTE_REQUESTS_PER_SECOND,
        ge=1,
        le=100,
        description="Client-side cap on quote requests per second",
    )

    # =========================================================================
    # Wallet
    # =========================================================================

    wallet_private_key: SecretStr | None = Field(
        default=None,
        description="Signing key as a JSON byte array or base58 string",
    )

    # =========================================================================
    # Trading Configuration
    # =========================================================================

    input_mint_address: str = Field(
        default=USDC_MINT,
        description="Base token mint; every round trip starts and ends here",
    )

    output_mint_address: str = Field(
        default=SOL_MINT,
        description="Intermediate token mint held between the two legs",
    )

    in_amount: float = Field(
        default=DEFAULT_IN_AMOUNT,
        gt=0.0,
        description="Fixed probe amount in base token units",
    )

    slippage_bps: int = Field(
        default=DEFAULT_SLIPPAGE_BPS,
        ge=0,
        le=10_000,
        description="Slippage tolerance in basis points",
    )

    max_fee_pct: float = Field(
        default=DEFAULT_MAX_FEE_PCT,
        ge=0.0,
        le=100.0,
        description="Maximum venue fee per hop, in percent",
    )

    include_direct_routes: bool = Field(
        default=True,
        description="Also request the best single-hop route as a fallback candidate",
    )

    tx_fee: float = Field(
        default=DEFAULT_TX_FEE,
        ge=0.0,
        description="Fixed cost of a round trip in base token units",
    )

    min_profit: float = Field(
        default=DEFAULT_MIN_PROFIT,
        description="Net profit required before opening a position",
    )

    min_profit_swap2_retry: float = Field(
        default=DEFAULT_MIN_PROFIT_RETRY,
        description="Net profit required when retrying the closing leg",
    )

    # =========================================================================
    # Retry & Backoff
    # =========================================================================

    swap1_failed_delay: float = Field(
        default=DEFAULT_LEG1_RETRY_DELAY,
        ge=0.0,
        le=600.0,
        description="Outer-loop delay per consecutive opening-leg failure (seconds)",
    )

    swap2_failed_delay: float = Field(
        default=DEFAULT_LEG2_RETRY_DELAY,
        ge=0.0,
        le=600.0,
        description="Closing-leg retry delay step (seconds)",
    )

    swap2_failed_reset_count: int = Field(
        default=DEFAULT_LEG2_RETRY_RESET_COUNT,
        ge=1,
        le=1000,
        description="Closing-leg attempts before the retry delay ramp restarts",
    )

    quote_spacing_seconds: float = Field(
        default=DEFAULT_QUOTE_SPACING,
        ge=0.0,
        le=10.0,
        description="Pause between the opening and closing leg quotes",
    )

    confirm_timeout_seconds: float = Field(
        default=DEFAULT_CONFIRM_TIMEOUT,
        ge=1.0,
        le=300.0,
        description="How long to wait for a swap transaction to confirm",
    )

    confirm_poll_interval_seconds: float = Field(
        default=DEFAULT_CONFIRM_POLL_INTERVAL,
        gt=0.0,
        le=10.0,
        description="Signature status polling interval",
    )

    # =========================================================================
    # Operation Mode
    # =========================================================================

    dry_run: bool = Field(
        default=True,
        description="Simulate swaps without sending transactions",
    )

    profit_log_path: Path = Field(
        default=Path(DEFAULT_PROFIT_LOG_PATH),
        description="Append-only file receiving one line per completed round trip",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional file receiving a copy of all log output",
    )

    status_interval_seconds: float = Field(
        default=DEFAULT_STATUS_INTERVAL,
        gt=0.0,
        description="Interval between status lines",
    )

    use_uvloop: bool = Field(
        default=True,
        description="Use uvloop for improved async performance",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("input_mint_address", "output_mint_address", mode="after")
    @classmethod
    def validate_mint(cls, v: str) -> str:
        """Ensure mint addresses are not blank."""
        v = v.strip()
        if not v:
            raise ValueError("Mint address cannot be empty")
        return v

    @field_validator("min_profit", mode="after")
    @classmethod
    def validate_profit_threshold(cls, v: float) -> float:
        """Warn if the opening threshold accepts losing trades."""
        if v < 0.0:
            import warnings

            warnings.warn(
                f"Profit threshold {v} is negative, round trips may lose money",
                stacklevel=2,
            )
        return v

    @model_validator(mode="after")
    def validate_trading_pair(self) -> "Settings":
        """Ensure the pair is a real round trip and live mode can sign."""
        if self.input_mint_address == self.output_mint_address:
            raise ValueError("Input and output mint must differ")

        if not self.dry_run:
            if self.wallet_private_key is None or not self.wallet_private_key.get_secret_value():
                raise ValueError("WALLET_PRIVATE_KEY is required when DRY_RUN is false")
        return self

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def rpc_endpoint(self) -> str:
        """RPC endpoint, falling back to the cluster's public endpoint."""
        return self.solana_rpc_endpoint or SOLANA_RPC_URLS[self.cluster]

    @property
    def resolved_token_list_url(self) -> str:
        """Token list URL, falling back to the cluster's Jupiter list."""
        return self.token_list_url or TOKEN_LIST_URLS[self.cluster]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
