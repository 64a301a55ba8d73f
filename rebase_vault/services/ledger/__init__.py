"""
Accrual ledger and transfer protocol.

create_rebase_token wires a ready-to-use token: event log, base token,
accrual ledger and access control sharing one clock.
"""

from rebase_vault.services.ledger.accrual_ledger import AccrualLedger
from rebase_vault.services.ledger.factory import create_rebase_token
from rebase_vault.services.ledger.transfer_protocol import TransferProtocol


__all__ = ["AccrualLedger", "TransferProtocol", "create_rebase_token"]
