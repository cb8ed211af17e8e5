"""Minimal async JSON-RPC client for read-only contract calls."""

import logging
from typing import Any, Optional

import httpx

from setquote.errors import ChainReadError

logger = logging.getLogger(__name__)


class JsonRpcClient:
    """Sends JSON-RPC requests to an EVM node over HTTP."""

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            rpc_url: Node HTTP endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject a mock here)
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._transport = transport
        self._request_id = 0

    async def request(self, method: str, params: list) -> Any:
        """Send one JSON-RPC request and return its ``result``.

        Raises:
            ChainReadError: On transport failure, non-200 status or an RPC error
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.rpc_url, json=payload)
        except httpx.HTTPError as e:
            raise ChainReadError(f"RPC request {method} failed: {e}", cause=e) from e

        if response.status_code != 200:
            raise ChainReadError(
                f"RPC request {method} failed: HTTP {response.status_code} - {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ChainReadError(f"RPC request {method} returned invalid JSON", cause=e) from e

        if "error" in data:
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ChainReadError(f"RPC request {method} failed: {message}")

        if "result" not in data:
            raise ChainReadError(f"RPC request {method} returned no result")

        return data["result"]

    async def eth_call(self, to: str, data: str, block: str = "latest") -> bytes:
        """Execute a read-only call and return the raw return data."""
        logger.debug(f"eth_call to={to} data={data[:10]}")
        result = await self.request("eth_call", [{"to": to, "data": data}, block])

        if not isinstance(result, str) or not result.startswith("0x"):
            raise ChainReadError(f"eth_call to {to} returned malformed data: {result!r}")
        if result == "0x":
            raise ChainReadError(f"eth_call to {to} returned empty data (not a contract?)")

        return bytes.fromhex(result[2:])
