"""Bitcoin P2PKH address encoding."""

import hashlib

import base58
from Crypto.Hash import RIPEMD160

from ..types import NetworkId, PublicKey

# P2PKH version bytes
MAINNET_VERSION = 0x00
TESTNET_VERSION = 0x6F


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160 of SHA-256."""
    return RIPEMD160.new(sha256(data)).digest()


def checksum(payload: bytes) -> bytes:
    """First 4 bytes of double SHA-256."""
    return sha256(sha256(payload))[:4]


def base58check_encode(payload: bytes) -> str:
    """Base58 encode ``payload || checksum(payload)`` with the Bitcoin alphabet."""
    return base58.b58encode(payload + checksum(payload)).decode()


class BitcoinAddressEncoder:
    """
    Legacy P2PKH address encoding.

    Example:
        >>> encoder = BitcoinAddressEncoder(NetworkId.TESTNET)
        >>> encoder.encode(PublicKey.parse("secp256k1:02ab..."))
        'm...'
    """

    def __init__(self, network: NetworkId = NetworkId.MAINNET) -> None:
        self._network = network

    @property
    def version(self) -> int:
        """Network version byte."""
        return MAINNET_VERSION if self._network == NetworkId.MAINNET else TESTNET_VERSION

    def encode(self, public_key: PublicKey) -> str:
        """Convert a public key to a Base58Check address."""
        payload = bytes([self.version]) + hash160(public_key.to_bytes())
        return base58check_encode(payload)

    def is_valid_address(self, address: str) -> bool:
        """Check version byte and checksum of a Base58Check address."""
        try:
            raw = base58.b58decode(address)
        except ValueError:
            return False
        if len(raw) != 25 or raw[0] != self.version:
            return False
        return checksum(raw[:21]) == raw[21:]
