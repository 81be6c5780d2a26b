"""Exchange module for aggregator and chain communication."""

from roundtrip.exchange.client import (
    JupiterAPIError,
    JupiterClient,
    JupiterClientError,
    NoRouteError,
)
from roundtrip.exchange.rate_limiter import RateLimiter
from roundtrip.exchange.rpc import RpcError, SolanaRpcClient


__all__ = [
    "JupiterAPIError",
    "JupiterClient",
    "JupiterClientError",
    "NoRouteError",
    "RateLimiter",
    "RpcError",
    "SolanaRpcClient",
]
