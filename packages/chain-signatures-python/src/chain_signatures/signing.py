"""Cross-chain address derivation and MPC signing requests."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from .chains import ChainConfig, ChainRegistry, get_address_encoder
from .config import SIGN_DEPOSIT, SIGN_GAS, get_config
from .derivation import get_derivation_path
from .mpc import MpcKeyClient
from .types import (
    AddressFamily,
    ChainId,
    DerivedAddress,
    InvalidInputError,
    SignatureRequest,
    SignatureResult,
    UnavailableError,
    parse_chain,
)

logger = logging.getLogger(__name__)


@dataclass
class FunctionCallAction:
    """State-changing contract call submitted by the wallet layer."""

    method_name: str
    args: dict[str, Any]
    gas: int = SIGN_GAS
    deposit: int = SIGN_DEPOSIT

    def to_dict(self) -> dict[str, Any]:
        """Wallet action shape (gas and deposit as decimal strings)."""
        return {
            "type": "FunctionCall",
            "params": {
                "methodName": self.method_name,
                "args": self.args,
                "gas": str(self.gas),
                "deposit": str(self.deposit),
            },
        }


class TransactionExecutor(Protocol):
    """Wallet/session layer able to sign and submit NEAR transactions."""

    async def sign_and_send_transaction(
        self, receiver_id: str, actions: list[FunctionCallAction]
    ) -> Any:
        """Submit a transaction and return its final execution outcome."""
        ...


class SignatureExtractor(Protocol):
    """Pulls ``{r, s, v}`` and the signing key out of a ``sign`` outcome."""

    def extract(self, outcome: Any, request: SignatureRequest) -> SignatureResult:
        ...


class UnsupportedSignatureExtractor:
    """
    Placeholder extractor.

    Where the signature sits inside the ``sign`` execution outcome depends on
    the deployed MPC contract; callers plug in an extractor for their
    contract version.
    """

    def extract(self, outcome: Any, request: SignatureRequest) -> SignatureResult:
        raise UnavailableError(
            "No signature extractor configured for the MPC contract outcome"
        )


@dataclass
class DerivationBatch:
    """Result of deriving addresses on several chains."""

    account_id: str
    addresses: list[DerivedAddress] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class SignatureRequestCoordinator:
    """
    Derives foreign-chain addresses for NEAR accounts and drives MPC signing.

    Example:
        >>> coordinator = SignatureRequestCoordinator(key_client, registry)
        >>>
        >>> # One chain, None on failure
        >>> derived = await coordinator.derive_foreign_address("alice.testnet", "ethereum")
        >>>
        >>> # Every chain, failed chains omitted
        >>> addresses = await coordinator.get_all_derived_addresses("alice.testnet")
        >>>
        >>> # Signing goes through the wallet layer
        >>> coordinator = SignatureRequestCoordinator(
        ...     key_client, registry, executor=wallet, extractor=extractor
        ... )
        >>> result = await coordinator.request_signature("alice.testnet", "ethereum", "0x...")
    """

    def __init__(
        self,
        key_client: MpcKeyClient,
        registry: ChainRegistry | None = None,
        executor: TransactionExecutor | None = None,
        extractor: SignatureExtractor | None = None,
        contract_id: str | None = None,
    ) -> None:
        if registry is None:
            registry = ChainRegistry.for_network(get_config().network_id)
        self._key_client = key_client
        self._registry = registry
        self._executor = executor
        self._extractor = extractor or UnsupportedSignatureExtractor()
        self._contract_id = contract_id or key_client.contract_id

    async def __aenter__(self) -> "SignatureRequestCoordinator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the key client's RPC connection."""
        await self._key_client.aclose()

    @property
    def key_client(self) -> MpcKeyClient:
        return self._key_client

    @property
    def registry(self) -> ChainRegistry:
        return self._registry

    @property
    def supported_chains(self) -> list[ChainId]:
        """Configured chains in registry order."""
        return self._registry.chains()

    def get_chain_config(self, chain: ChainId | str) -> ChainConfig:
        """Get chain configuration."""
        return self._registry.get(chain)

    def is_chain_supported(self, chain: str) -> bool:
        """Check if a specific chain is supported."""
        return self._registry.is_supported(chain)

    # ============================================================================
    # Address derivation
    # ============================================================================

    async def derive_address(
        self, account_id: str, chain: ChainId | str, index: int = 0
    ) -> DerivedAddress:
        """Derive the address controlled by ``account_id`` on ``chain``, raising on failure."""
        path = get_derivation_path(account_id, chain, index)
        config = self._registry.get(chain)

        public_key = await self._key_client.derive_child_public_key(account_id, path)
        encoder = get_address_encoder(config.family, self._registry.network)

        return DerivedAddress(
            chain=config.chain,
            address=encoder.encode(public_key),
            path=path,
            public_key=public_key,
        )

    async def derive_foreign_address(
        self, account_id: str, chain: ChainId | str, index: int = 0
    ) -> DerivedAddress | None:
        """Derive the foreign chain address for a NEAR account, or None on any failure."""
        try:
            return await self.derive_address(account_id, chain, index)
        except Exception as e:
            logger.warning("Failed to derive %s address for %s: %s", chain, account_id, e)
            return None

    async def derive_batch(
        self, account_id: str, chains: Iterable[ChainId | str] | None = None
    ) -> DerivationBatch:
        """
        Derive index-0 addresses one chain at a time, recording failures.

        Without ``chains`` every configured EVM chain is derived, in registry order.
        """
        if chains is None:
            chains = self._registry.by_family(AddressFamily.EVM)
        batch = DerivationBatch(account_id=account_id)
        for chain in chains:
            derived = await self.derive_foreign_address(account_id, chain)
            if derived is None:
                batch.failed.append(str(chain))
            else:
                batch.addresses.append(derived)
        return batch

    async def get_all_derived_addresses(
        self, account_id: str, chains: Iterable[ChainId | str] | None = None
    ) -> list[DerivedAddress]:
        """Get derived addresses for the EVM chains (or ``chains``); failed chains are omitted."""
        batch = await self.derive_batch(account_id, chains)
        return batch.addresses

    # ============================================================================
    # Signing
    # ============================================================================

    def build_signature_request(
        self,
        account_id: str,
        chain: ChainId | str,
        payload: bytes | str,
        index: int = 0,
        key_version: int = 0,
    ) -> SignatureRequest:
        """Build a signing request for a hex or raw payload."""
        path = get_derivation_path(account_id, chain, index)
        if isinstance(key_version, bool) or not isinstance(key_version, int) or key_version < 0:
            raise InvalidInputError(f"Key version must be a non-negative integer: {key_version!r}")
        return SignatureRequest(
            chain=parse_chain(chain),
            payload=_payload_bytes(payload),
            path=path,
            key_version=key_version,
        )

    async def request_signature(
        self,
        account_id: str,
        chain: ChainId | str,
        payload: bytes | str,
        index: int = 0,
        key_version: int = 0,
    ) -> SignatureResult:
        """
        Request a signature for a foreign chain transaction.

        Submits ``sign`` to the MPC contract through the transaction executor
        and hands the outcome to the signature extractor.

        Raises:
            UnavailableError: no executor configured, or the extractor cannot
                read the outcome.
            InvalidInputError: bad account, chain, index or payload.
        """
        if self._executor is None:
            raise UnavailableError("No transaction executor configured for signing")

        request = self.build_signature_request(account_id, chain, payload, index, key_version)
        action = FunctionCallAction(method_name="sign", args=request.to_args())

        logger.info(
            "Requesting %s signature from %s (path=%s, key_version=%d)",
            request.chain.value,
            self._contract_id,
            request.path,
            request.key_version,
        )
        outcome = await self._executor.sign_and_send_transaction(self._contract_id, [action])
        return self._extractor.extract(outcome, request)

    async def is_chain_signatures_enabled(self) -> bool:
        """Check if chain signatures are available on this network."""
        try:
            await self._key_client.fetch_root_public_key()
            return True
        except Exception as e:
            logger.info("Chain signatures unavailable: %s", e)
            return False


def _payload_bytes(payload: bytes | str) -> bytes:
    if isinstance(payload, str):
        try:
            payload = bytes.fromhex(payload.removeprefix("0x"))
        except ValueError as e:
            raise InvalidInputError("Payload must be hex encoded", e) from e
    if not payload:
        raise InvalidInputError("Payload must not be empty")
    return bytes(payload)
