"""
Tests for MpcKeyClient.
"""
from __future__ import annotations

import asyncio
import base64
import json

import httpx
import pytest

from chain_signatures import (
    InvalidInputError,
    MpcKeyClient,
    NearRpcClient,
    NetworkError,
    ProtocolError,
    PublicKey,
)

from conftest import DERIVED_KEY, MPC_CONTRACT, NODE_URL, ROOT_KEY, make_rpc, rpc_error, view_result


class TestFetchRootPublicKey:
    """Tests for the cached root key."""

    @pytest.mark.asyncio
    async def test_fetches_once(self, healthy_key_client, calls):
        """Should query the contract once and serve later calls from cache."""
        first = await healthy_key_client.fetch_root_public_key()
        second = await healthy_key_client.fetch_root_public_key()

        assert first == PublicKey.parse(ROOT_KEY)
        assert second is first
        assert len(calls) == 1
        assert calls[0]["method_name"] == "public_key"
        assert calls[0]["account_id"] == MPC_CONTRACT

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self):
        """Should retry the remote call on the next invocation after a failure."""
        responses = [rpc_error("boom"), view_result(ROOT_KEY)]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=responses.pop(0))

        client = MpcKeyClient(make_rpc(handler), MPC_CONTRACT)

        with pytest.raises(ProtocolError):
            await client.fetch_root_public_key()
        assert client.cached_root_public_key is None

        assert await client.fetch_root_public_key() == PublicKey.parse(ROOT_KEY)

    @pytest.mark.asyncio
    async def test_concurrent_callers_keep_first_success(self):
        """Should let concurrent callers query but store only the first result."""
        keys = iter(["secp256k1:02" + "aa" * 32, "secp256k1:02" + "bb" * 32])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=view_result(next(keys)))

        client = MpcKeyClient(make_rpc(handler), MPC_CONTRACT)

        results = await asyncio.gather(
            client.fetch_root_public_key(), client.fetch_root_public_key()
        )

        assert results[0] == results[1] == client.cached_root_public_key

    @pytest.mark.asyncio
    async def test_fresh_clients_do_not_share_cache(self, healthy_key_client):
        await healthy_key_client.fetch_root_public_key()

        other = MpcKeyClient(
            make_rpc(lambda r: httpx.Response(200, json=view_result(ROOT_KEY))), MPC_CONTRACT
        )

        assert healthy_key_client.cached_root_public_key is not None
        assert other.cached_root_public_key is None

    @pytest.mark.asyncio
    async def test_clear_cache(self, healthy_key_client, calls):
        await healthy_key_client.fetch_root_public_key()
        healthy_key_client.clear_cache()
        await healthy_key_client.fetch_root_public_key()

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_malformed_key(self):
        client = MpcKeyClient(
            make_rpc(lambda r: httpx.Response(200, json=view_result({"key": 1}))), MPC_CONTRACT
        )

        with pytest.raises(ProtocolError):
            await client.fetch_root_public_key()


class TestDeriveChildPublicKey:
    """Tests for child key derivation."""

    @pytest.mark.asyncio
    async def test_passes_path_and_predecessor(self, healthy_key_client, calls):
        key = await healthy_key_client.derive_child_public_key(
            "alice.testnet", "alice.testnet,ethereum,0"
        )

        params = calls[0]
        assert key == PublicKey.parse(DERIVED_KEY)
        assert params["method_name"] == "derived_public_key"
        assert json.loads(base64.b64decode(params["args_base64"])) == {
            "path": "alice.testnet,ethereum,0",
            "predecessor": "alice.testnet",
        }

    @pytest.mark.asyncio
    async def test_not_cached(self, healthy_key_client, calls):
        """Should query the contract on every call."""
        await healthy_key_client.derive_child_public_key("alice.testnet", "p")
        await healthy_key_client.derive_child_public_key("alice.testnet", "p")

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_missing_result(self):
        client = MpcKeyClient(
            make_rpc(lambda r: httpx.Response(200, json={"jsonrpc": "2.0", "result": {}})),
            MPC_CONTRACT,
        )

        with pytest.raises(ProtocolError):
            await client.derive_child_public_key("alice.testnet", "p")

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = MpcKeyClient(make_rpc(handler), MPC_CONTRACT)

        with pytest.raises(NetworkError):
            await client.derive_child_public_key("alice.testnet", "p")

    @pytest.mark.asyncio
    async def test_empty_account(self, healthy_key_client, calls):
        with pytest.raises(InvalidInputError):
            await healthy_key_client.derive_child_public_key("", "p")
        assert calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["secp256k1:02 11", "secp256k1:021", "secp256k1:zz"])
    async def test_malformed_key_material(self, key):
        """Should treat non-hex contract keys as protocol errors."""
        client = MpcKeyClient(
            make_rpc(lambda r: httpx.Response(200, json=view_result(key))), MPC_CONTRACT
        )

        with pytest.raises(ProtocolError):
            await client.derive_child_public_key("alice.testnet", "p")


class TestClose:
    """Tests for releasing the RPC connection."""

    @pytest.mark.asyncio
    async def test_closes_owned_client(self):
        async with MpcKeyClient(NearRpcClient(NODE_URL), MPC_CONTRACT) as client:
            assert not client.rpc.is_closed

        assert client.rpc.is_closed
