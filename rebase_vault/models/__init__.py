"""
Ledger models.

Pydantic records describing holders, events and persisted snapshots,
plus the SQLAlchemy tables that store them.
"""

from rebase_vault.models.enums import Role
from rebase_vault.models.events import (
    Deposited,
    GlobalRateChanged,
    InterestSettled,
    LedgerEvent,
    Redeemed,
    Transfer,
)
from rebase_vault.models.holder import HolderRecord, LedgerSnapshot


__all__ = [
    "Deposited",
    "GlobalRateChanged",
    "HolderRecord",
    "InterestSettled",
    "LedgerEvent",
    "LedgerSnapshot",
    "Redeemed",
    "Role",
    "Transfer",
]
