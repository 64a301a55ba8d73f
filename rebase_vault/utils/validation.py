"""Holder address validation."""

import re

from web3 import Web3

from rebase_vault.config.constants import ZERO_ADDRESS
from rebase_vault.utils.exceptions import InvalidAddress


def validate_address(address: object) -> tuple[bool, str | None]:
    """
    Validate an EVM-style holder address.

    Args:
        address: Address to validate

    Returns:
        Tuple of (is_valid, error_message)
        - (True, None) if valid
        - (False, error_message) if invalid

    Examples:
        >>> validate_address("0x1234567890123456789012345678901234567890")
        (True, None)
        >>> validate_address("invalid")
        (False, 'Address must start with 0x')
    """
    if not address or not isinstance(address, str):
        return False, "Address is empty"

    address = address.strip()

    if not address.startswith("0x"):
        return False, "Address must start with 0x"

    if len(address) != 42:
        return False, "Address must be 42 characters"

    if not re.fullmatch(r"0x[0-9a-fA-F]{40}", address):
        return False, "Invalid address format"

    return True, None


def normalize_address(address: object, *, allow_zero: bool = True) -> str:
    """
    Return the checksum form of a holder address.

    Args:
        address: Address in any letter case
        allow_zero: Whether the zero address is acceptable here

    Returns:
        Checksummed address

    Raises:
        InvalidAddress: If the address is malformed or a forbidden zero address
    """
    is_valid, error = validate_address(address)
    if not is_valid:
        raise InvalidAddress(address, error or "invalid")

    checksummed = Web3.to_checksum_address(address.strip())  # type: ignore[union-attr]

    if not allow_zero and checksummed == ZERO_ADDRESS:
        raise InvalidAddress(address, "zero address not allowed")

    return checksummed


def is_zero_address(address: str) -> bool:
    return address.lower() == ZERO_ADDRESS.lower()
