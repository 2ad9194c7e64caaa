"""
Network configuration for the Chain Signatures SDK.

The NEAR network is selected once per process, from the
``CHAIN_SIGNATURES_NETWORK`` environment variable ("mainnet" or "testnet",
default "testnet"). Optional overrides:

    CHAIN_SIGNATURES_NODE_URL:      NEAR RPC endpoint
    CHAIN_SIGNATURES_MPC_CONTRACT:  MPC signer contract account
    CHAIN_SIGNATURES_RPC_TIMEOUT:   transport timeout in seconds (unset = none)
"""

from __future__ import annotations

import functools
import logging
import os
from dataclasses import dataclass

from .types import InvalidInputError, NetworkId, parse_network

logger = logging.getLogger(__name__)

# MPC signer contract per network
MPC_CONTRACTS: dict[NetworkId, str] = {
    NetworkId.MAINNET: "v1.signer.near",
    NetworkId.TESTNET: "v1.signer-prod.testnet",
}

# 60 Tgas and 1 yoctoNEAR for ``sign`` calls
SIGN_GAS = 60_000_000_000_000
SIGN_DEPOSIT = 1


@dataclass(frozen=True)
class NetworkConfig:
    """NEAR network configuration."""

    network_id: NetworkId
    node_url: str
    mpc_contract_id: str
    explorer_url: str
    request_timeout: float | None = None

    @property
    def is_mainnet(self) -> bool:
        return self.network_id == NetworkId.MAINNET

    @classmethod
    def for_network(cls, network: NetworkId | str) -> "NetworkConfig":
        """Default configuration for a network."""
        network_id = parse_network(network)
        return cls(
            network_id=network_id,
            node_url=f"https://rpc.{network_id.value}.near.org",
            mpc_contract_id=MPC_CONTRACTS[network_id],
            explorer_url=f"https://{network_id.value}.nearblocks.io",
        )

    @classmethod
    def from_env(cls) -> "NetworkConfig":
        """Build configuration from environment variables."""
        base = cls.for_network(os.getenv("CHAIN_SIGNATURES_NETWORK", "testnet"))

        timeout: float | None = None
        raw_timeout = os.getenv("CHAIN_SIGNATURES_RPC_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as e:
                raise InvalidInputError(
                    f"Invalid CHAIN_SIGNATURES_RPC_TIMEOUT: {raw_timeout!r}", e
                ) from e

        config = cls(
            network_id=base.network_id,
            node_url=os.getenv("CHAIN_SIGNATURES_NODE_URL") or base.node_url,
            mpc_contract_id=os.getenv("CHAIN_SIGNATURES_MPC_CONTRACT") or base.mpc_contract_id,
            explorer_url=base.explorer_url,
            request_timeout=timeout,
        )
        logger.debug(
            "Chain signatures config loaded (network=%s, node=%s, contract=%s)",
            config.network_id.value,
            config.node_url,
            config.mpc_contract_id,
        )
        return config


@functools.lru_cache(maxsize=1)
def get_config() -> NetworkConfig:
    """Process-wide configuration, resolved on first use."""
    return NetworkConfig.from_env()
