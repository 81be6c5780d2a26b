"""
Async Jupiter aggregator client.

Optimized for a tight polling loop with:
- Connection pooling and keep-alive
- Fast JSON parsing with orjson
- Integrated rate limiting
- Short-lived quote cache
"""

import logging
from collections import OrderedDict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
import orjson
from pydantic import ValidationError

from roundtrip.config.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    ENDPOINT_QUOTE,
    ENDPOINT_SWAP,
    JUPITER_API_URL,
    NO_ROUTE_ERROR_CODES,
    QUOTE_CACHE_MAX_ENTRIES,
    QUOTE_CACHE_TTL,
)
from roundtrip.core.types import Route
from roundtrip.exchange.models import ErrorResponse, QuoteResponse, SwapResponse
from roundtrip.exchange.rate_limiter import RateLimiter
from roundtrip.utils.time import monotonic_s


logger = logging.getLogger(__name__)

_CacheKey = tuple[str, str, int, int]


class JupiterClientError(Exception):
    """Base exception for Jupiter client errors."""

    def __init__(self, message: str, code: int | str | None = None) -> None:
        super().__init__(message)
        self.code = code


class JupiterAPIError(JupiterClientError):
    """Exception for Jupiter API error responses."""

    pass


class NoRouteError(JupiterAPIError):
    """The aggregator found no route for the pair and amount."""

    pass


class JupiterClient:
    """
    Async Jupiter REST client.

    Features:
    - Single session with connection pooling
    - orjson for fast JSON parsing
    - Separate rate limits for quotes and swaps
    - Multiple route variants merged into one candidate list
    """

    def __init__(
        self,
        base_url: str = JUPITER_API_URL,
        api_key: str | None = None,
        timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT,
        include_direct_routes: bool = True,
        rate_limiter: RateLimiter | None = None,
        cache_ttl: float = QUOTE_CACHE_TTL,
    ) -> None:
        """
        Initialize the Jupiter client.

        Args:
            base_url: Base URL of the swap API.
            api_key: Optional API key sent as x-api-key.
            timeout_seconds: Total timeout for one request.
            include_direct_routes: Also request the best single-hop route.
            rate_limiter: Optional rate limiter instance.
            cache_ttl: Lifetime of cached quote results in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._include_direct_routes = include_direct_routes
        self._rate_limiter = rate_limiter or RateLimiter()
        self._cache_ttl = cache_ttl
        self._cache: OrderedDict[_CacheKey, tuple[float, list[Route]]] = OrderedDict()
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=20,
                limit_per_host=10,
                keepalive_timeout=30,
                enable_cleanup_closed=True,
            )

            headers = {"Accept": "application/json"}
            if self._api_key:
                headers["x-api-key"] = self._api_key

            self._session = aiohttp.ClientSession(
                connector=connector,
                headers=headers,
                timeout=self._timeout,
                json_serialize=lambda x: orjson.dumps(x).decode(),
            )

        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    @asynccontextmanager
    async def _request_context(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Context manager for making requests."""
        session = await self._get_session()
        try:
            yield session
        except (aiohttp.ClientError, TimeoutError) as e:
            raise JupiterClientError(f"Network error: {e!r}") from e

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an API request.

        Args:
            method: HTTP method (GET or POST).
            url: Absolute URL.
            params: Query parameters.
            body: JSON body for POST requests.

        Returns:
            Parsed JSON response.

        Raises:
            NoRouteError: When the aggregator reports no route.
            JupiterAPIError: On API error response.
            JupiterClientError: On network or other errors.
        """
        async with self._request_context() as session:
            if method == "GET":
                async with session.get(url, params=params) as response:
                    return await self._handle_response(response)
            elif method == "POST":
                async with session.post(url, json=body) as response:
                    return await self._handle_response(response)
            else:
                raise JupiterClientError(f"Unsupported method: {method}")

    async def _handle_response(self, response: aiohttp.ClientResponse) -> Any:
        """Parse and validate response."""
        raw = await response.read()

        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            if response.status >= 400:
                raise JupiterAPIError(
                    f"API error {response.status}: {raw[:200]!r}", code=response.status
                ) from e
            raise JupiterClientError(f"Invalid JSON response: {e}") from e

        if response.status >= 400:
            try:
                error = (
                    ErrorResponse.model_validate(data) if isinstance(data, dict) else ErrorResponse()
                )
            except ValidationError:
                error = ErrorResponse()
            message = error.error or str(data)
            if error.error_code in NO_ROUTE_ERROR_CODES:
                raise NoRouteError(message, code=error.error_code)
            raise JupiterAPIError(
                f"API error {response.status}: {message}",
                code=error.error_code or response.status,
            )

        return data

    # =========================================================================
    # Quotes
    # =========================================================================

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
        only_direct_routes: bool = False,
    ) -> Route:
        """
        Get the best route for one swap.

        Args:
            input_mint: Mint sold.
            output_mint: Mint bought.
            amount: Input amount in atomic units.
            slippage_bps: Slippage tolerance in basis points.
            only_direct_routes: Restrict to single-hop routes.

        Returns:
            The aggregator's best route.
        """
        await self._rate_limiter.acquire_quote()

        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": str(slippage_bps),
            "swapMode": "ExactIn",
        }
        if only_direct_routes:
            params["onlyDirectRoutes"] = "true"

        data = await self._request("GET", f"{self._base_url}{ENDPOINT_QUOTE}", params=params)

        try:
            quote = QuoteResponse.model_validate(data)
        except ValidationError as e:
            raise JupiterClientError(f"Unexpected quote response: {e}") from e

        if not quote.route_plan or quote.out_amount <= 0:
            raise NoRouteError(f"No route for {input_mint} -> {output_mint}")

        return quote.to_route(data)

    async def compute_routes(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
        force_fetch: bool = True,
    ) -> list[Route]:
        """
        Get candidate routes ordered by output amount, best first.

        Queries every enabled route variant. One failing variant is
        tolerated as long as another returns a route.

        Args:
            input_mint: Mint sold.
            output_mint: Mint bought.
            amount: Input amount in atomic units.
            slippage_bps: Slippage tolerance in basis points.
            force_fetch: Bypass the quote cache.

        Returns:
            De-duplicated candidate routes.

        Raises:
            JupiterClientError: When no variant returned a route.
        """
        key: _CacheKey = (input_mint, output_mint, amount, slippage_bps)

        if not force_fetch:
            cached = self._cache_get(key)
            if cached is not None:
                return cached

        variants = [False, True] if self._include_direct_routes else [False]
        routes: list[Route] = []
        last_error: JupiterClientError | None = None

        for only_direct in variants:
            try:
                routes.append(
                    await self.get_quote(
                        input_mint,
                        output_mint,
                        amount,
                        slippage_bps,
                        only_direct_routes=only_direct,
                    )
                )
            except JupiterClientError as e:
                logger.debug(f"Route variant direct={only_direct} failed: {e}")
                last_error = e

        if not routes and last_error is not None:
            raise last_error

        candidates = self._merge(routes)
        self._cache_put(key, candidates)
        return candidates

    @staticmethod
    def _merge(routes: list[Route]) -> list[Route]:
        """Drop routes with a repeated venue path and sort best first."""
        seen: set[tuple[str, ...]] = set()
        unique: list[Route] = []
        for route in sorted(routes, key=lambda r: r.out_amount, reverse=True):
            if route.venue_path in seen:
                continue
            seen.add(route.venue_path)
            unique.append(route)
        return unique

    def _cache_get(self, key: _CacheKey) -> list[Route] | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        expires_at, routes = entry
        if monotonic_s() >= expires_at:
            del self._cache[key]
            return None
        return list(routes)

    def _cache_put(self, key: _CacheKey, routes: list[Route]) -> None:
        self._cache[key] = (monotonic_s() + self._cache_ttl, list(routes))
        self._cache.move_to_end(key)
        while len(self._cache) > QUOTE_CACHE_MAX_ENTRIES:
            self._cache.popitem(last=False)

    # =========================================================================
    # Swaps
    # =========================================================================

    async def get_swap_transaction(self, route: Route, user_public_key: str) -> SwapResponse:
        """
        Build the swap transaction for a route.

        Args:
            route: Route returned by a quote request.
            user_public_key: Wallet that signs and pays.

        Returns:
            Unsigned serialized transaction.
        """
        await self._rate_limiter.acquire_swap()

        body = {
            "quoteResponse": dict(route.payload),
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicComputeUnitLimit": True,
        }
        data = await self._request("POST", f"{self._base_url}{ENDPOINT_SWAP}", body=body)

        try:
            return SwapResponse.model_validate(data)
        except ValidationError as e:
            raise JupiterClientError(f"Unexpected swap response: {e}") from e

    # =========================================================================
    # Token list
    # =========================================================================

    async def get_token_list(self, url: str) -> list[dict[str, Any]]:
        """
        Fetch the raw token registry document.

        Args:
            url: Token list URL.

        Returns:
            Token entries as published by the registry.
        """
        data = await self._request("GET", url)
        if isinstance(data, dict):
            data = data.get("tokens", [])
        if not isinstance(data, list):
            raise JupiterClientError(f"Unexpected token list response: {type(data).__name__}")
        return data

    async def __aenter__(self) -> "JupiterClient":
        """Async context manager entry."""
        await self._get_session()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.close()
