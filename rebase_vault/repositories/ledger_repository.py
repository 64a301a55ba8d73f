"""
Ledger repository.

Saves and loads LedgerSnapshot objects with SQLAlchemy.
"""

from loguru import logger
from sqlalchemy import create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from rebase_vault.config.settings import LedgerSettings, get_settings
from rebase_vault.models.db import (
    AllowanceRow,
    Base,
    HolderRow,
    RoleMemberRow,
    SnapshotRow,
)
from rebase_vault.models.holder import AllowanceRecord, HolderRecord, LedgerSnapshot


def create_session_factory(
    database_url: str | None = None,
    config: LedgerSettings | None = None,
) -> sessionmaker[Session]:
    """
    Create engine, ensure tables exist and return a session factory.

    Args:
        database_url: Overrides config.database_url
        config: Settings, process settings by default
    """
    config = config or get_settings()
    engine = create_engine(
        database_url or config.database_url,
        echo=config.database_echo,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(engine, expire_on_commit=False, autoflush=False)


class LedgerRepository:
    """
    Snapshot repository.

    Example:
        repo = LedgerRepository(session)
        snapshot_id = repo.save(token.export_state())
        token.restore_state(repo.load_latest())
    """

    def __init__(self, session: Session) -> None:
        """
        Initialize repository.

        Args:
            session: Database session
        """
        self.session = session

    def save(self, snapshot: LedgerSnapshot) -> int:
        """
        Persist snapshot and commit.

        Returns:
            Snapshot ID
        """
        row = SnapshotRow(
            global_rate=str(snapshot.global_rate),
            precision_factor=str(snapshot.precision_factor),
            owner=snapshot.owner,
            taken_at=snapshot.taken_at,
        )
        row.holders = [
            HolderRow(
                address=h.address,
                principal=str(h.principal),
                rate=str(h.rate),
                last_settlement=h.last_settlement,
            )
            for h in snapshot.holders
        ]
        row.allowances = [
            AllowanceRow(owner=a.owner, spender=a.spender, amount=str(a.amount))
            for a in snapshot.allowances
        ]
        row.role_members = [
            RoleMemberRow(role=role, account=account)
            for role, accounts in sorted(snapshot.role_members.items())
            for account in accounts
        ]

        try:
            self.session.add(row)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                "Failed to save ledger snapshot",
                extra={"holders": len(snapshot.holders), "error": str(e)},
            )
            raise

        logger.info(
            "Ledger snapshot saved",
            extra={"snapshot_id": row.id, "holders": len(snapshot.holders)},
        )
        return row.id

    def get(self, snapshot_id: int) -> LedgerSnapshot | None:
        stmt = (
            select(SnapshotRow)
            .options(
                selectinload(SnapshotRow.holders),
                selectinload(SnapshotRow.allowances),
                selectinload(SnapshotRow.role_members),
            )
            .where(SnapshotRow.id == snapshot_id)
        )
        row = self.session.execute(stmt).scalar_one_or_none()
        return self._to_snapshot(row) if row else None

    def load_latest(self) -> LedgerSnapshot | None:
        """Most recently saved snapshot, or None if there is none."""
        stmt = select(SnapshotRow.id).order_by(SnapshotRow.id.desc()).limit(1)
        snapshot_id = self.session.execute(stmt).scalar_one_or_none()
        if snapshot_id is None:
            return None
        return self.get(snapshot_id)

    def prune(self, keep: int = 10) -> int:
        """
        Delete all but the newest keep snapshots.

        Returns:
            Number of snapshots deleted
        """
        stmt = select(SnapshotRow.id).order_by(SnapshotRow.id.desc()).offset(keep)
        stale = list(self.session.execute(stmt).scalars().all())
        if not stale:
            return 0

        for model in (HolderRow, AllowanceRow, RoleMemberRow):
            self.session.execute(delete(model).where(model.snapshot_id.in_(stale)))
        self.session.execute(delete(SnapshotRow).where(SnapshotRow.id.in_(stale)))
        self.session.commit()

        logger.info("Pruned ledger snapshots", extra={"deleted": len(stale)})
        return len(stale)

    @staticmethod
    def _to_snapshot(row: SnapshotRow) -> LedgerSnapshot:
        role_members: dict[str, list[str]] = {}
        for member in row.role_members:
            role_members.setdefault(member.role, []).append(member.account)

        return LedgerSnapshot(
            holders=[
                HolderRecord(
                    address=h.address,
                    principal=int(h.principal),
                    rate=int(h.rate),
                    last_settlement=h.last_settlement,
                )
                for h in sorted(row.holders, key=lambda h: h.address)
            ],
            allowances=[
                AllowanceRecord(owner=a.owner, spender=a.spender, amount=int(a.amount))
                for a in sorted(row.allowances, key=lambda a: (a.owner, a.spender))
            ],
            global_rate=int(row.global_rate),
            precision_factor=int(row.precision_factor),
            owner=row.owner,
            role_members={r: sorted(a) for r, a in role_members.items()},
            taken_at=row.taken_at,
        )
