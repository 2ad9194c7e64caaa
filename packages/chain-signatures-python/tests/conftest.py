"""
Pytest configuration for chain_signatures tests.
"""
from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from chain_signatures import ChainRegistry, MpcKeyClient, NearRpcClient, NetworkId

NODE_URL = "https://rpc.testnet.near.org"
MPC_CONTRACT = "v1.signer-prod.testnet"

# Compressed secp256k1 keys in the contract's wire format
ROOT_KEY = "secp256k1:02" + "11" * 32
DERIVED_KEY = "secp256k1:0250863ad64a87ae8a2fe83c1af1a8403cb53f53e486d8511dad8a04887e5b2352"


def view_result(value: Any) -> dict[str, Any]:
    """NEAR ``call_function`` response carrying a JSON return value."""
    return {
        "jsonrpc": "2.0",
        "id": "dontcare",
        "result": {
            "result": list(json.dumps(value).encode()),
            "logs": [],
            "block_height": 1,
            "block_hash": "11111111111111111111111111111111",
        },
    }


def rpc_error(message: str) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": "dontcare",
        "error": {"name": "HANDLER_ERROR", "message": message, "code": -32000},
    }


def make_rpc(handler: Callable[[httpx.Request], httpx.Response]) -> NearRpcClient:
    """RPC client whose transport is served by ``handler``."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NearRpcClient(NODE_URL, client=client)


@pytest.fixture
def testnet_registry():
    return ChainRegistry.for_network(NetworkId.TESTNET)


@pytest.fixture
def mainnet_registry():
    return ChainRegistry.for_network(NetworkId.MAINNET)


@pytest.fixture
def calls():
    """Decoded request params seen by the mock transport."""
    return []


@pytest.fixture
def healthy_key_client(calls):
    """Key client backed by a contract that answers every query."""

    def handler(request: httpx.Request) -> httpx.Response:
        params = json.loads(request.content)["params"]
        calls.append(params)
        if params["method_name"] == "public_key":
            return httpx.Response(200, json=view_result(ROOT_KEY))
        return httpx.Response(200, json=view_result(DERIVED_KEY))

    return MpcKeyClient(make_rpc(handler), MPC_CONTRACT)
