"""Chain registry and address encoders for multi-chain support."""

from ..config import get_config
from ..types import (
    AddressFamily,
    ChainId,
    InvalidInputError,
    NetworkId,
    ProtocolError,
    PublicKey,
)
from .bitcoin import BitcoinAddressEncoder
from .evm import EvmAddressEncoder
from .registry import MAINNET_CHAINS, TESTNET_CHAINS, ChainConfig, ChainRegistry


def get_address_encoder(
    family: AddressFamily, network: NetworkId = NetworkId.MAINNET
) -> EvmAddressEncoder | BitcoinAddressEncoder:
    """Get the encoder for an address family."""
    if family == AddressFamily.EVM:
        return EvmAddressEncoder()
    if family == AddressFamily.BITCOIN:
        return BitcoinAddressEncoder(network)
    raise InvalidInputError(f"Unsupported address family: {family!r}")


def public_key_to_address(
    public_key: PublicKey | str,
    chain: ChainId | str,
    registry: ChainRegistry | None = None,
) -> str:
    """
    Convert a public key to a chain-specific address.

    The chain's address family and network come from ``registry``, which
    defaults to the registry of the configured network.
    """
    if registry is None:
        registry = ChainRegistry.for_network(get_config().network_id)
    if isinstance(public_key, str):
        try:
            public_key = PublicKey.parse(public_key)
        except ProtocolError as e:
            raise InvalidInputError(e.message, e) from e

    config = registry.get(chain)
    return get_address_encoder(config.family, registry.network).encode(public_key)


__all__ = [
    "BitcoinAddressEncoder",
    "ChainConfig",
    "ChainRegistry",
    "EvmAddressEncoder",
    "MAINNET_CHAINS",
    "TESTNET_CHAINS",
    "get_address_encoder",
    "public_key_to_address",
]
