"""Minimal async JSON-RPC client."""

import itertools
from typing import Any

import httpx

from interop.errors import RpcError


class JsonRpcClient:
    """JSON-RPC 2.0 over HTTP POST."""

    def __init__(self, url: str, timeout: float = 30.0):
        self.url = url
        self.timeout = timeout
        self._ids = itertools.count(1)
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        """Call method and return its ``result``.

        Raises:
            RpcError: the node answered with a JSON-RPC error object
            httpx.HTTPError: transport failure or non-2xx status
        """
        client = await self._get_client()
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        response = await client.post(self.url, json=payload)
        response.raise_for_status()
        body = response.json()

        error = body.get("error")
        if error:
            raise RpcError(
                error.get("message", "unknown JSON-RPC error"),
                code=error.get("code"),
                data=error.get("data"),
            )
        return body.get("result")
