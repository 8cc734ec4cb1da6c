"""Migration service wiring the loader, the SQL store and the runner.

Each operation loads the migration files, opens one database session and
runs the requested runner operation against a SqlSchemaStore.
"""

from pathlib import Path

from pbmigrate.application.services.migration_runner import MigrationRunner
from pbmigrate.core.logging import get_logger
from pbmigrate.domain.entities.migration import MigrationStatusEntry, RunReport
from pbmigrate.infrastructure.migrations import MigrationGenerator, MigrationLoader
from pbmigrate.infrastructure.persistence.database import DatabaseManager
from pbmigrate.infrastructure.persistence.sql_schema_store import SqlSchemaStore

logger = get_logger(__name__)


class MigrationService:
    """Service for running file-based migrations against the database."""

    def __init__(
        self,
        db: DatabaseManager,
        loader: MigrationLoader | None = None,
        lock_owner: str | None = None,
    ) -> None:
        """Initialize the migration service.

        Args:
            db: Database manager providing sessions.
            loader: Migration loader. Defaults to the configured migrations dir.
            lock_owner: Identifier written to the store lock.
        """
        self.db = db
        self.loader = loader or MigrationLoader(db.settings.migrations_dir)
        self.lock_owner = lock_owner or db.settings.lock_owner

    async def up(self) -> RunReport:
        """Apply all pending migrations."""
        units = self.loader.load()
        async with self.db.session() as session:
            runner = MigrationRunner(SqlSchemaStore(session), self.lock_owner)
            return await runner.apply_pending(units)

    async def down(self, n: int = 1) -> RunReport:
        """Revert the last ``n`` applied migrations."""
        units = self.loader.load()
        async with self.db.session() as session:
            runner = MigrationRunner(SqlSchemaStore(session), self.lock_owner)
            return await runner.revert_last(units, n)

    async def status(self) -> tuple[list[MigrationStatusEntry], list[str]]:
        """Return the state of every migration file and the orphaned ledger entries."""
        units = self.loader.load()
        async with self.db.session() as session:
            runner = MigrationRunner(SqlSchemaStore(session), self.lock_owner)
            return await runner.status(units), await runner.orphaned(units)

    async def history_sync(self) -> list[str]:
        """Drop ledger entries whose migration file no longer exists."""
        units = self.loader.load()
        async with self.db.session() as session:
            runner = MigrationRunner(SqlSchemaStore(session), self.lock_owner)
            removed = await runner.history_sync(units)

        if removed:
            logger.info("Removed orphaned migration records", files=removed)
        return removed

    async def snapshot(self, timestamp: int | None = None) -> Path:
        """Write a migration that recreates every stored collection."""
        async with self.db.session() as session:
            collections = await SqlSchemaStore(session).list_collections()

        path = MigrationGenerator(self.loader.migrations_dir).create_snapshot(
            collections, timestamp=timestamp
        )
        logger.info("Collections snapshot created", path=str(path), collections=len(collections))
        return path

    async def unlock(self) -> str | None:
        """Force-release the migration lock.

        Returns:
            The owner that held the lock, or None if it was free.
        """
        async with self.db.session() as session:
            return await SqlSchemaStore(session).break_lock()
