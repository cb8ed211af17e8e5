"""Input guards shared by the quoting clients.

Every guard raises ``InputError`` so callers see one error type for bad input.
"""

from typing import Any, Iterable

from eth_utils import is_address

from setquote.chains import SUPPORTED_CHAIN_IDS
from setquote.errors import InputError


def is_supported_chain_id(chain_id: int) -> None:
    """Reject chain ids the quoter has no endpoints for."""
    if chain_id not in SUPPORTED_CHAIN_IDS:
        raise InputError(
            f"Unsupported chainId: {chain_id}. Must be one of {SUPPORTED_CHAIN_IDS}"
        )


def is_valid_address(name: str, address: Any) -> None:
    """Require a 0x-prefixed 20-byte hex address; checksum casing is not enforced."""
    if (
        not isinstance(address, str)
        or not address.startswith(("0x", "0X"))
        or not is_address(address.lower())
    ):
        raise InputError(f"Validation error: {name} must be a valid address, got {address!r}")


def includes(values: Iterable[Any], value: Any, error_message: str) -> None:
    if value not in values:
        raise InputError(error_message)
