"""
Token registry.

Holds decimals and symbols for every token in the aggregator's token list,
looked up by mint address.
"""

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from roundtrip.core.types import Token
from roundtrip.exchange.models import TokenEntry


logger = logging.getLogger(__name__)


class TokenRegistry:
    """
    Token metadata indexed by mint address.

    Loaded once at startup; read-only afterwards.
    """

    __slots__ = ("_tokens", "_skipped")

    def __init__(self) -> None:
        self._tokens: dict[str, Token] = {}
        self._skipped = 0

    def load(self, entries: Iterable[dict[str, Any]]) -> int:
        """
        Load tokens from raw token list entries.

        Entries missing an address, symbol or valid decimals are skipped.
        A repeated address keeps its first entry.

        Args:
            entries: Raw token list entries.

        Returns:
            Number of tokens in the registry.
        """
        for item in entries:
            try:
                entry = TokenEntry.model_validate(item)
            except ValidationError:
                self._skipped += 1
                continue

            if not entry.address or entry.address in self._tokens:
                continue

            self._tokens[entry.address] = Token(
                symbol=entry.symbol or entry.address[:6],
                address=entry.address,
                decimals=entry.decimals,
            )

        if self._skipped:
            logger.debug(f"Skipped {self._skipped} malformed token entries")
        return len(self._tokens)

    def add(self, token: Token) -> None:
        """Register a single token."""
        self._tokens[token.address] = token

    def get(self, address: str) -> Token | None:
        """Get a token by mint address."""
        return self._tokens.get(address)

    def __contains__(self, address: object) -> bool:
        return address in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    @property
    def skipped(self) -> int:
        """Number of malformed entries ignored while loading."""
        return self._skipped
