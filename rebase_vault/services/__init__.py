"""
Ledger services.

Layered bottom-up: base token bookkeeping, accrual ledger, transfer
protocol (token facade), vault.
"""
