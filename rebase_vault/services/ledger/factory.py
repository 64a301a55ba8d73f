"""Token wiring."""

from loguru import logger

from rebase_vault.config.settings import LedgerSettings, get_settings
from rebase_vault.services.access_control import AccessControl
from rebase_vault.services.events import EventLog
from rebase_vault.services.ledger.accrual_ledger import AccrualLedger
from rebase_vault.services.ledger.transfer_protocol import TransferProtocol
from rebase_vault.services.token.base_token import BaseTokenLedger
from rebase_vault.utils.clock import Clock, SystemClock


def create_rebase_token(
    owner: str,
    clock: Clock | None = None,
    config: LedgerSettings | None = None,
    *,
    precision_factor: int | None = None,
    initial_interest_rate: int | None = None,
) -> TransferProtocol:
    """
    Build a token with its own ledger.

    Args:
        owner: Owner address (may set rates and grant roles)
        clock: Time source, SystemClock by default
        config: Settings, process settings by default
        precision_factor: Overrides config.precision_factor
        initial_interest_rate: Overrides config.initial_interest_rate

    Returns:
        Wired TransferProtocol
    """
    config = config or get_settings()
    clock = clock or SystemClock()

    precision = precision_factor if precision_factor is not None else config.precision_factor
    rate = (
        initial_interest_rate
        if initial_interest_rate is not None
        else config.initial_interest_rate
    )

    events = EventLog()
    token = BaseTokenLedger(events, clock)
    ledger = AccrualLedger(
        token=token,
        events=events,
        clock=clock,
        precision_factor=precision,
        global_rate=rate,
    )
    access = AccessControl(owner)

    logger.info(
        "Rebase token created",
        extra={
            "owner": access.owner,
            "precision_factor": str(precision),
            "global_rate": str(rate),
        },
    )
    return TransferProtocol(ledger, access)
