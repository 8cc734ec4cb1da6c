"""SQLAlchemy models for the migration ledger and run lock."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pbmigrate.infrastructure.persistence.database import Base


class MigrationModel(Base):
    """Ledger row for an applied migration.

    Attributes:
        file: Migration name, e.g. "1701871781_updated_projects".
        applied: When the migration was applied (UTC).
    """

    __tablename__ = "_migrations"

    file: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Migration name",
    )
    applied: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="When the migration was applied",
    )

    def __repr__(self) -> str:
        return f"<Migration(file={self.file}, applied={self.applied})>"


class MigrationLockModel(Base):
    """Single-row table holding the run-level migration lock.

    The primary key is always LOCK_ID, so a second concurrent insert fails
    with an integrity error.
    """

    __tablename__ = "_migration_lock"

    LOCK_ID = 1

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner: Mapped[str] = mapped_column(String(255), nullable=False)
    acquired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<MigrationLock(owner={self.owner}, acquired_at={self.acquired_at})>"
