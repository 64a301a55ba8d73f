"""Holder and snapshot records."""

from pydantic import BaseModel, ConfigDict, Field


class HolderRecord(BaseModel):
    """Model for a single holder's accrual state.

    principal is the settled amount held by the base token; rate and
    last_settlement drive accrual on top of it.
    """

    model_config = ConfigDict(frozen=True)

    address: str = Field(..., description="Checksummed holder address")
    principal: int = Field(default=0, ge=0, description="Settled balance")
    rate: int = Field(default=0, ge=0, description="Per-second rate, fixed-point")
    last_settlement: int = Field(
        default=0, ge=0, description="Timestamp of last settlement"
    )


class AllowanceRecord(BaseModel):
    """Approved spending of owner's principal by spender."""

    model_config = ConfigDict(frozen=True)

    owner: str
    spender: str
    amount: int = Field(..., ge=0)


class LedgerSnapshot(BaseModel):
    """Complete persisted state of a token facade.

    Enough to rebuild the ledger, its base token and access control.
    """

    holders: list[HolderRecord] = Field(default_factory=list)
    allowances: list[AllowanceRecord] = Field(default_factory=list)
    global_rate: int = Field(..., ge=0)
    precision_factor: int = Field(..., gt=0)
    owner: str
    role_members: dict[str, list[str]] = Field(default_factory=dict)
    taken_at: int = Field(default=0, ge=0)
