"""
Ledger events.

Observable notifications published when an operation commits.
"""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class LedgerEvent(BaseModel):
    """Base event; name identifies the event type in logs and subscribers."""

    model_config = ConfigDict(frozen=True)

    name: ClassVar[str] = "LedgerEvent"
    timestamp: int = Field(..., ge=0, description="Clock time of emission")


class Deposited(LedgerEvent):
    """Base asset deposited into the vault and minted 1:1."""

    name: ClassVar[str] = "Deposited"
    holder: str
    amount: int = Field(..., ge=0)


class Redeemed(LedgerEvent):
    """Ledger units burned and base asset released 1:1."""

    name: ClassVar[str] = "Redeemed"
    holder: str
    amount: int = Field(..., ge=0)


class GlobalRateChanged(LedgerEvent):
    """Global interest rate lowered (or re-set to the same value)."""

    name: ClassVar[str] = "GlobalRateChanged"
    previous: int = Field(..., ge=0)
    new: int = Field(..., ge=0)


class Transfer(LedgerEvent):
    """Principal moved; zero address marks mint (sender) or burn (recipient)."""

    name: ClassVar[str] = "Transfer"
    sender: str
    recipient: str
    amount: int = Field(..., ge=0)


class InterestSettled(LedgerEvent):
    """Accrued interest folded into principal."""

    name: ClassVar[str] = "InterestSettled"
    holder: str
    amount: int = Field(..., ge=0)
    rate: int = Field(..., ge=0)
