"""
Chain Signatures SDK

A Python SDK for controlling foreign-chain addresses from a NEAR account
through the NEAR MPC signer network (Chain Signatures).

Example:
    >>> from chain_signatures import create_chain_signatures
    >>>
    >>> coordinator = create_chain_signatures()
    >>>
    >>> # Derive the Ethereum address controlled by a NEAR account
    >>> derived = await coordinator.derive_foreign_address("alice.testnet", "ethereum")
    >>> derived.address, derived.path
    ('0x...', 'alice.testnet,ethereum,0')
"""

import httpx

from .chains import (
    BitcoinAddressEncoder,
    ChainConfig,
    ChainRegistry,
    EvmAddressEncoder,
    get_address_encoder,
    public_key_to_address,
)
from .config import SIGN_DEPOSIT, SIGN_GAS, NetworkConfig, get_config
from .derivation import get_derivation_path, is_valid_account_id
from .mpc import MpcKeyClient
from .rpc import NearRpcClient, RpcError, RpcResponse
from .signing import (
    DerivationBatch,
    FunctionCallAction,
    SignatureExtractor,
    SignatureRequestCoordinator,
    TransactionExecutor,
    UnsupportedSignatureExtractor,
)
from .types import (
    AddressFamily,
    ChainId,
    ChainSignaturesError,
    DerivedAddress,
    ErrorCode,
    InvalidInputError,
    NetworkError,
    NetworkId,
    ProtocolError,
    PublicKey,
    SignatureRequest,
    SignatureResult,
    UnavailableError,
)


def create_chain_signatures(
    config: NetworkConfig | None = None,
    client: httpx.AsyncClient | None = None,
    executor: TransactionExecutor | None = None,
    extractor: SignatureExtractor | None = None,
) -> SignatureRequestCoordinator:
    """
    Wire RPC client, key client and chain registry for a network.

    The coordinator owns the RPC connection unless ``client`` is given; close
    it with ``aclose()`` or use it as an async context manager.
    """
    config = config or get_config()
    rpc = NearRpcClient(config.node_url, client=client, timeout=config.request_timeout)
    return SignatureRequestCoordinator(
        MpcKeyClient(rpc, config.mpc_contract_id),
        ChainRegistry.for_network(config.network_id),
        executor=executor,
        extractor=extractor,
    )


__version__ = "0.1.0"
__all__ = [
    "create_chain_signatures",
    # Chains
    "BitcoinAddressEncoder",
    "ChainConfig",
    "ChainRegistry",
    "EvmAddressEncoder",
    "get_address_encoder",
    "public_key_to_address",
    # Config
    "NetworkConfig",
    "get_config",
    "SIGN_GAS",
    "SIGN_DEPOSIT",
    # Derivation
    "get_derivation_path",
    "is_valid_account_id",
    # MPC network
    "MpcKeyClient",
    "NearRpcClient",
    "RpcError",
    "RpcResponse",
    # Signing
    "DerivationBatch",
    "FunctionCallAction",
    "SignatureExtractor",
    "SignatureRequestCoordinator",
    "TransactionExecutor",
    "UnsupportedSignatureExtractor",
    # Types
    "AddressFamily",
    "ChainId",
    "DerivedAddress",
    "NetworkId",
    "PublicKey",
    "SignatureRequest",
    "SignatureResult",
    "ErrorCode",
    "ChainSignaturesError",
    "InvalidInputError",
    "NetworkError",
    "ProtocolError",
    "UnavailableError",
]
