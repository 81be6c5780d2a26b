"""Market module for token metadata and quotes."""

from roundtrip.market.quotes import QuoteService
from roundtrip.market.tokens import TokenRegistry


__all__ = [
    "QuoteService",
    "TokenRegistry",
]
