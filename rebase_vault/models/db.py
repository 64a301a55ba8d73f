"""
Database tables for ledger snapshots.

uint256 quantities are stored as decimal strings so they round-trip
exactly on every backend.
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


UINT256_DIGITS = 78


class Base(DeclarativeBase):
    """Declarative base for ledger tables."""


class SnapshotRow(Base):
    """One saved ledger state."""

    __tablename__ = "ledger_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    global_rate: Mapped[str] = mapped_column(String(UINT256_DIGITS), nullable=False)
    precision_factor: Mapped[str] = mapped_column(
        String(UINT256_DIGITS), nullable=False
    )
    owner: Mapped[str] = mapped_column(String(42), nullable=False)
    taken_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    holders: Mapped[list["HolderRow"]] = relationship(
        back_populates="snapshot", cascade="all, delete-orphan"
    )
    allowances: Mapped[list["AllowanceRow"]] = relationship(
        back_populates="snapshot", cascade="all, delete-orphan"
    )
    role_members: Mapped[list["RoleMemberRow"]] = relationship(
        back_populates="snapshot", cascade="all, delete-orphan"
    )


class HolderRow(Base):
    __tablename__ = "ledger_holders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    snapshot_id: Mapped[int] = mapped_column(
        ForeignKey("ledger_snapshots.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    address: Mapped[str] = mapped_column(String(42), nullable=False)
    principal: Mapped[str] = mapped_column(String(UINT256_DIGITS), nullable=False)
    rate: Mapped[str] = mapped_column(String(UINT256_DIGITS), nullable=False)
    last_settlement: Mapped[int] = mapped_column(BigInteger, nullable=False)

    snapshot: Mapped[SnapshotRow] = relationship(back_populates="holders")


class AllowanceRow(Base):
    __tablename__ = "ledger_allowances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    snapshot_id: Mapped[int] = mapped_column(
        ForeignKey("ledger_snapshots.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    owner: Mapped[str] = mapped_column(String(42), nullable=False)
    spender: Mapped[str] = mapped_column(String(42), nullable=False)
    amount: Mapped[str] = mapped_column(String(UINT256_DIGITS), nullable=False)

    snapshot: Mapped[SnapshotRow] = relationship(back_populates="allowances")


class RoleMemberRow(Base):
    __tablename__ = "ledger_role_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    snapshot_id: Mapped[int] = mapped_column(
        ForeignKey("ledger_snapshots.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    account: Mapped[str] = mapped_column(String(42), nullable=False)

    snapshot: Mapped[SnapshotRow] = relationship(back_populates="role_members")
