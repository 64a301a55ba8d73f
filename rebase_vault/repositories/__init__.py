"""Persistence of ledger snapshots."""

from rebase_vault.repositories.ledger_repository import (
    LedgerRepository,
    create_session_factory,
)


__all__ = ["LedgerRepository", "create_session_factory"]
