"""Custodial vault exchanging the base asset 1:1 for ledger units."""

from rebase_vault.services.vault.asset_transport import (
    AssetTransport,
    InMemoryAssetTransport,
    Web3AssetTransport,
)
from rebase_vault.services.vault.vault import Vault


__all__ = [
    "AssetTransport",
    "InMemoryAssetTransport",
    "Vault",
    "Web3AssetTransport",
]
