"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- Bare accrual ledger without the token facade
- Helper that funds a holder through the minter
"""

import pytest

from rebase_vault.services.events import EventLog
from rebase_vault.services.ledger.accrual_ledger import AccrualLedger
from rebase_vault.services.token.base_token import BaseTokenLedger
from tests.constants import PRECISION, RATE


@pytest.fixture
def events() -> EventLog:
    return EventLog()


@pytest.fixture
def base_token(events, clock) -> BaseTokenLedger:
    return BaseTokenLedger(events, clock)


@pytest.fixture
def ledger(base_token, events, clock) -> AccrualLedger:
    """
    Accrual ledger wired to a fresh base token.

    Returns:
        AccrualLedger: precision 1e18, global rate 5e10
    """
    return AccrualLedger(
        token=base_token,
        events=events,
        clock=clock,
        precision_factor=PRECISION,
        global_rate=RATE,
    )


@pytest.fixture
def fund(token, minter):
    """
    Mint through the minter at the token's current global rate.

    Returns:
        Callable taking (holder, amount)
    """

    def _fund(holder: str, amount: int) -> None:
        token.mint(minter, holder, amount, token.get_interest_rate())

    return _fund
