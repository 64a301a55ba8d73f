"""Enumerations."""

from enum import StrEnum


class Role(StrEnum):
    """Capabilities grantable by the owner."""

    MINT_AND_BURN = "mint_and_burn"
