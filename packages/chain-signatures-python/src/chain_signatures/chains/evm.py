"""EVM address encoding."""

import re

from eth_hash.auto import keccak

from ..types import PublicKey

_ADDRESS_RE = re.compile(r"^0x[0-9a-f]{40}$")


class EvmAddressEncoder:
    """
    Keccak-256 address encoding for Ethereum-family chains.

    The key bytes are hashed exactly as the MPC contract serializes them
    (compressed, 33 bytes) without decompressing first, so derived addresses
    differ from the textbook ``keccak(uncompressed[1:])`` form. Addresses
    already handed out depend on this.

    Example:
        >>> encoder = EvmAddressEncoder()
        >>> encoder.encode(PublicKey.parse("secp256k1:02ab..."))
        '0x...'
    """

    def encode(self, public_key: PublicKey) -> str:
        """Convert a public key to a lowercase ``0x`` address."""
        digest = keccak(public_key.to_bytes())
        return "0x" + digest[-20:].hex()

    def is_valid_address(self, address: str) -> bool:
        """Check if an address has the shape this encoder produces."""
        return bool(_ADDRESS_RE.match(address))
