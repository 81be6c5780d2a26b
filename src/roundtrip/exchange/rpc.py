"""
Minimal Solana JSON-RPC client.

Covers the handful of calls the live executor needs: submitting a signed
transaction, polling its status and reading its balance changes.
"""

import logging
from typing import Any

import aiohttp
import orjson

from roundtrip.config.constants import DEFAULT_REQUEST_TIMEOUT


logger = logging.getLogger(__name__)


class RpcError(Exception):
    """Transport or JSON-RPC level failure."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class SolanaRpcClient:
    """Async JSON-RPC client over a single pooled aiohttp session."""

    def __init__(self, endpoint: str, timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT) -> None:
        self._endpoint = endpoint
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: aiohttp.ClientSession | None = None
        self._request_id = 0

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(limit=10, keepalive_timeout=30),
                timeout=self._timeout,
                json_serialize=lambda x: orjson.dumps(x).decode(),
            )
        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Invoke one RPC method.

        Args:
            method: JSON-RPC method name.
            params: Positional parameters.

        Returns:
            The `result` member of the response.

        Raises:
            RpcError: On transport failure or an `error` member.
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        session = await self._get_session()
        try:
            async with session.post(self._endpoint, json=payload) as response:
                raw = await response.read()
                status = response.status
        except (aiohttp.ClientError, TimeoutError) as e:
            raise RpcError(f"RPC transport error for {method}: {e!r}") from e

        try:
            body = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise RpcError(f"Invalid RPC response for {method} (status {status})") from e

        if status >= 400 and not isinstance(body, dict):
            raise RpcError(f"RPC call failed: method={method} status={status}", code=status)
        if not isinstance(body, dict):
            raise RpcError(f"Invalid RPC response for {method}: {body!r}")

        error = body.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message", error) if isinstance(error, dict) else error
            raise RpcError(f"RPC error for {method}: {message}", code=code)

        return body.get("result")

    async def send_transaction(self, encoded_tx: str, skip_preflight: bool = True) -> str:
        """
        Submit a base64 encoded signed transaction.

        Returns:
            The transaction signature.
        """
        result = await self.call(
            "sendTransaction",
            [
                encoded_tx,
                {
                    "encoding": "base64",
                    "skipPreflight": skip_preflight,
                    "maxRetries": 2,
                },
            ],
        )
        if not isinstance(result, str) or not result:
            raise RpcError(f"Unexpected sendTransaction result: {result!r}")
        return result

    async def get_signature_status(self, signature: str) -> dict[str, Any] | None:
        """Current status of a signature, or None while it is unknown."""
        result = await self.call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}],
        )
        value = result.get("value") if isinstance(result, dict) else None
        if not value:
            return None
        return value[0]

    async def get_transaction(self, signature: str) -> dict[str, Any] | None:
        """Confirmed transaction with parsed balances, or None if not found."""
        result = await self.call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "jsonParsed",
                    "commitment": "confirmed",
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )
        return result if isinstance(result, dict) else None

    async def __aenter__(self) -> "SolanaRpcClient":
        await self._get_session()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
