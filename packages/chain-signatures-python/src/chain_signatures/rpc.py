"""NEAR JSON-RPC view-call client."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .types import NetworkError, ProtocolError

logger = logging.getLogger(__name__)


@dataclass
class RpcError:
    """Error object of a JSON-RPC response."""

    message: str
    name: str | None = None
    data: Any = None


@dataclass
class RpcResponse:
    """
    Typed envelope of a ``call_function`` query response.

    ``result`` holds the raw bytes the contract method returned; exactly one
    of ``result`` and ``error`` is set.
    """

    result: bytes | None = None
    error: RpcError | None = None

    @classmethod
    def from_json(cls, data: Any) -> "RpcResponse":
        """Decode a JSON-RPC response body strictly."""
        if not isinstance(data, dict):
            raise ProtocolError(f"Unexpected RPC response: {data!r}")

        error = data.get("error")
        if error is not None:
            if isinstance(error, dict):
                message = error.get("message") or error.get("name") or "RPC error"
                return cls(error=RpcError(message, error.get("name"), error.get("data")))
            return cls(error=RpcError(str(error)))

        outer = data.get("result")
        if not isinstance(outer, dict):
            raise ProtocolError("RPC response has no result")

        # Contract panics are reported inside the result object
        if "error" in outer:
            return cls(error=RpcError(str(outer["error"])))

        raw = outer.get("result")
        if not isinstance(raw, list):
            raise ProtocolError("RPC response is missing result.result")
        try:
            return cls(result=bytes(raw))
        except (TypeError, ValueError) as e:
            raise ProtocolError("RPC result is not a byte sequence", e) from e

    def json(self) -> Any:
        """Parse the result bytes as UTF-8 JSON."""
        if self.error is not None:
            raise ProtocolError(self.error.message)
        if self.result is None:
            raise ProtocolError("RPC response is missing result.result")
        try:
            return json.loads(self.result.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ProtocolError("RPC result is not valid JSON", e) from e


class NearRpcClient:
    """
    Minimal NEAR RPC client for read-only contract calls.

    Example:
        >>> async with NearRpcClient("https://rpc.testnet.near.org") as rpc:
        ...     key = await rpc.view_function("v1.signer-prod.testnet", "public_key")
    """

    def __init__(
        self,
        node_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._node_url = node_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def node_url(self) -> str:
        return self._node_url

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def __aenter__(self) -> "NearRpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def query(
        self, contract_id: str, method_name: str, args: dict[str, Any] | None = None
    ) -> RpcResponse:
        """Issue a ``call_function`` query at final finality."""
        args_base64 = base64.b64encode(json.dumps(args or {}).encode()).decode()
        body = {
            "jsonrpc": "2.0",
            "id": "dontcare",
            "method": "query",
            "params": {
                "request_type": "call_function",
                "finality": "final",
                "account_id": contract_id,
                "method_name": method_name,
                "args_base64": args_base64,
            },
        }

        try:
            response = await self._client.post(self._node_url, json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug("RPC %s.%s failed: %s", contract_id, method_name, e)
            raise NetworkError(f"RPC request to {self._node_url} failed: {e}", e) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError("RPC response is not valid JSON", e) from e

        return RpcResponse.from_json(data)

    async def view_function(
        self, contract_id: str, method_name: str, args: dict[str, Any] | None = None
    ) -> Any:
        """Call a view method and return its decoded JSON result."""
        response = await self.query(contract_id, method_name, args)
        return response.json()
