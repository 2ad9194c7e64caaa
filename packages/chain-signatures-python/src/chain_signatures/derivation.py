"""Derivation path construction."""

import re

from .types import ChainId, InvalidInputError, parse_chain

_ACCOUNT_ID_RE = re.compile(r"^(([a-z\d]+[-_])*[a-z\d]+\.)*([a-z\d]+[-_])*[a-z\d]+$")


def get_derivation_path(account_id: str, chain: ChainId | str, index: int = 0) -> str:
    """
    Build the canonical derivation path ``<account>,<chain>,<index>``.

    The same inputs always give the same path, and the path is what the MPC
    contract uses to pick the child key, so it must be rebuilt identically to
    get back to an address later.

    Raises:
        InvalidInputError: empty or comma-containing account, unknown chain,
            negative or non-integer index.
    """
    if not isinstance(account_id, str) or not account_id:
        raise InvalidInputError("Account ID must be a non-empty string")
    if "," in account_id:
        raise InvalidInputError(f"Account ID may not contain ',': {account_id!r}")
    chain_id = parse_chain(chain)
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise InvalidInputError(f"Derivation index must be a non-negative integer: {index!r}")

    return f"{account_id},{chain_id.value},{index}"


def is_valid_account_id(account_id: str) -> bool:
    """Validate NEAR account ID format (2-64 chars, lowercase, '-'/'_' separators)."""
    if not account_id or not 2 <= len(account_id) <= 64:
        return False
    return bool(_ACCOUNT_ID_RE.match(account_id))
