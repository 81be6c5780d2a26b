"""Configuration module for the round-trip engine."""

from roundtrip.config.constants import (
    DEFAULT_MAX_FEE_PCT,
    DEFAULT_SLIPPAGE_BPS,
    JUPITER_API_URL,
    SOL_MINT,
    USDC_MINT,
)
from roundtrip.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_MAX_FEE_PCT",
    "DEFAULT_SLIPPAGE_BPS",
    "JUPITER_API_URL",
    "SOL_MINT",
    "USDC_MINT",
]
