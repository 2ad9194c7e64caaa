"""MPC signer contract key access."""

from __future__ import annotations

import logging
from typing import Any

from .rpc import NearRpcClient
from .types import InvalidInputError, PublicKey

logger = logging.getLogger(__name__)


class MpcKeyClient:
    """
    Read access to the MPC signer contract.

    The network root key is cached on the instance after the first successful
    fetch. Concurrent first calls may each reach the contract; only the first
    successful response is stored. Derived keys are never cached.

    Example:
        >>> async with NearRpcClient(config.node_url) as rpc:
        ...     client = MpcKeyClient(rpc, config.mpc_contract_id)
        ...     root = await client.fetch_root_public_key()
        ...     child = await client.derive_child_public_key(
        ...         "alice.testnet", "alice.testnet,ethereum,0"
        ...     )
    """

    def __init__(self, rpc: NearRpcClient, contract_id: str) -> None:
        self._rpc = rpc
        self._contract_id = contract_id
        self._root_public_key: PublicKey | None = None

    async def __aenter__(self) -> "MpcKeyClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the RPC client."""
        await self._rpc.aclose()

    @property
    def rpc(self) -> NearRpcClient:
        return self._rpc

    @property
    def contract_id(self) -> str:
        return self._contract_id

    @property
    def cached_root_public_key(self) -> PublicKey | None:
        """Root key if already fetched."""
        return self._root_public_key

    async def fetch_root_public_key(self) -> PublicKey:
        """Get the MPC network root public key."""
        if self._root_public_key is not None:
            return self._root_public_key

        result = await self._rpc.view_function(self._contract_id, "public_key")
        key = PublicKey.parse(result)

        if self._root_public_key is None:
            self._root_public_key = key
            logger.debug("Cached MPC root public key from %s", self._contract_id)
        return self._root_public_key

    async def derive_child_public_key(self, account_id: str, path: str) -> PublicKey:
        """Derive the public key the contract assigns to ``(account_id, path)``."""
        if not account_id:
            raise InvalidInputError("Account ID must be a non-empty string")

        result = await self._rpc.view_function(
            self._contract_id,
            "derived_public_key",
            {"path": path, "predecessor": account_id},
        )
        return PublicKey.parse(result)

    def clear_cache(self) -> None:
        """Forget the cached root key."""
        self._root_public_key = None
