"""Core type definitions for the Chain Signatures SDK."""

import re
from enum import Enum, IntEnum
from typing import Any
from dataclasses import dataclass

_HEX_KEY_RE = re.compile(r"(0x)?([0-9a-fA-F]{2})+")


class ChainId(str, Enum):
    """Supported destination chains (registry order)."""

    ETHEREUM = "ethereum"
    BITCOIN = "bitcoin"
    POLYGON = "polygon"
    ARBITRUM = "arbitrum"
    OPTIMISM = "optimism"

    def __str__(self) -> str:
        return self.value


class AddressFamily(IntEnum):
    """Address encoding families."""

    EVM = 0  # Keccak-256 based, Ethereum-style
    BITCOIN = 1  # Base58Check P2PKH


class NetworkId(str, Enum):
    """NEAR network the SDK runs against."""

    MAINNET = "mainnet"
    TESTNET = "testnet"

    def __str__(self) -> str:
        return self.value


class ErrorCode(IntEnum):
    """Error codes for SDK operations."""

    INVALID_INPUT = 1
    NETWORK_ERROR = 2
    PROTOCOL_ERROR = 3
    UNAVAILABLE = 4
    UNKNOWN = 99


class ChainSignaturesError(Exception):
    """Base exception for the Chain Signatures SDK."""

    code = ErrorCode.UNKNOWN

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class InvalidInputError(ChainSignaturesError):
    """Empty account, unknown chain or unsupported index."""

    code = ErrorCode.INVALID_INPUT


class NetworkError(ChainSignaturesError):
    """Transport failure reaching the RPC node."""

    code = ErrorCode.NETWORK_ERROR


class ProtocolError(ChainSignaturesError):
    """Response present but malformed or missing expected fields."""

    code = ErrorCode.PROTOCOL_ERROR


class UnavailableError(ChainSignaturesError):
    """Feature not usable on the current network or configuration."""

    code = ErrorCode.UNAVAILABLE


def parse_chain(chain: "ChainId | str") -> ChainId:
    """Coerce a chain identifier, raising InvalidInputError for unknown values."""
    if isinstance(chain, ChainId):
        return chain
    try:
        return ChainId(chain)
    except ValueError as e:
        raise InvalidInputError(f"Unsupported chain: {chain!r}", e) from e


@dataclass(frozen=True)
class PublicKey:
    """Curve-tagged public key as serialized by the MPC contract."""

    curve: str  # e.g. "secp256k1"
    data: str  # key material, hex

    @classmethod
    def parse(cls, value: str) -> "PublicKey":
        """Parse the wire form ``<curve>:<key>``; an untagged key defaults to secp256k1."""
        if not isinstance(value, str) or not value:
            raise ProtocolError(f"Invalid public key: {value!r}")
        curve, sep, data = value.partition(":")
        if not sep:
            curve, data = "secp256k1", value
        if not curve or not data:
            raise ProtocolError(f"Invalid public key: {value!r}")
        if not _HEX_KEY_RE.fullmatch(data):
            raise ProtocolError(f"Public key is not hex encoded: {value!r}")
        return cls(curve=curve, data=data)

    def to_bytes(self) -> bytes:
        """Raw key bytes, decoded literally from the hex key material."""
        if not _HEX_KEY_RE.fullmatch(self.data):
            raise InvalidInputError(f"Public key is not hex encoded: {self.data!r}")
        return bytes.fromhex(self.data.removeprefix("0x"))

    def __str__(self) -> str:
        return f"{self.curve}:{self.data}"


@dataclass(frozen=True)
class DerivedAddress:
    """A chain-native address derived for a NEAR account."""

    chain: ChainId
    address: str
    path: str  # Derivation path that produced the key
    public_key: PublicKey


@dataclass
class SignatureRequest:
    """Signing request for the MPC contract's ``sign`` method."""

    chain: ChainId
    payload: bytes
    path: str
    key_version: int = 0

    def to_args(self) -> dict[str, Any]:
        """Contract arguments for ``sign``."""
        return {
            "request": {
                "payload": list(self.payload),
                "path": self.path,
                "key_version": self.key_version,
            }
        }


@dataclass
class SignatureResult:
    """ECDSA signature components returned by the MPC network."""

    r: str  # R component (hex string with 0x prefix)
    s: str  # S component (hex string with 0x prefix)
    v: int  # Recovery ID
    public_key: PublicKey | None = None

    def to_bytes(self) -> bytes:
        """Convert to bytes (r || s || v)."""
        r_bytes = bytes.fromhex(self.r.removeprefix("0x"))
        s_bytes = bytes.fromhex(self.s.removeprefix("0x"))
        return r_bytes + s_bytes + bytes([self.v])

    def to_hex(self) -> str:
        """Convert to hex string."""
        return "0x" + self.to_bytes().hex()


def parse_network(network: "NetworkId | str") -> NetworkId:
    """Coerce a network identifier, raising InvalidInputError for unknown values."""
    if isinstance(network, NetworkId):
        return network
    try:
        return NetworkId(str(network).strip().lower())
    except ValueError as e:
        raise InvalidInputError(
            f"Unknown network: {network!r}. "
            f"Valid options: {', '.join(n.value for n in NetworkId)}",
            e,
        ) from e
