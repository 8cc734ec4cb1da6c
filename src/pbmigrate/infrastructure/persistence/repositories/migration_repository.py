"""Repository for the migration ledger and run lock."""

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from pbmigrate.infrastructure.persistence.models import MigrationLockModel, MigrationModel


class MigrationRepository:
    """Repository for _migrations and _migration_lock operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_applied(self) -> list[MigrationModel]:
        """List applied migrations in application order (oldest first).

        Returns:
            Ledger rows ordered by applied time, then file name.
        """
        result = await self.session.execute(
            select(MigrationModel).order_by(MigrationModel.applied, MigrationModel.file)
        )
        return list(result.scalars().all())

    async def add(self, file: str, applied: datetime | None = None) -> MigrationModel:
        record = MigrationModel(file=file, applied=applied or datetime.now(timezone.utc))
        self.session.add(record)
        await self.session.flush()
        return record

    async def delete(self, file: str) -> bool:
        """Delete a ledger row.

        Returns:
            True if a row was deleted, False otherwise.
        """
        result = await self.session.execute(
            delete(MigrationModel).where(MigrationModel.file == file)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def get_lock(self) -> MigrationLockModel | None:
        result = await self.session.execute(
            select(MigrationLockModel).where(MigrationLockModel.id == MigrationLockModel.LOCK_ID)
        )
        return result.scalar_one_or_none()

    async def create_lock(self, owner: str) -> MigrationLockModel:
        """Insert the lock row.

        Raises:
            IntegrityError: If the lock row already exists.
        """
        lock = MigrationLockModel(
            id=MigrationLockModel.LOCK_ID,
            owner=owner,
            acquired_at=datetime.now(timezone.utc),
        )
        self.session.add(lock)
        await self.session.flush()
        return lock

    async def delete_lock(self, owner: str | None = None) -> bool:
        """Delete the lock row.

        Args:
            owner: Only delete the row if this owner holds it. None deletes it
                regardless of owner.

        Returns:
            True if a row was deleted, False otherwise.
        """
        stmt = delete(MigrationLockModel).where(MigrationLockModel.id == MigrationLockModel.LOCK_ID)
        if owner is not None:
            stmt = stmt.where(MigrationLockModel.owner == owner)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
