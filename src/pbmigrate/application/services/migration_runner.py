"""Migration runner.

Applies pending migration units in order and reverts applied ones, keeping
the store's ledger in sync. A run holds the store lock for its whole
duration. Each unit runs in its own store transaction together with its
ledger update, so a failing unit leaves no writes behind. Units applied
earlier in the same run are kept; there is no automatic rollback.
"""

import uuid
from typing import Iterable, Sequence

from pbmigrate.core.config import get_settings
from pbmigrate.core.logging import LoggingContext, get_logger
from pbmigrate.domain.entities.migration import (
    MigrationDirection,
    MigrationState,
    MigrationStatusEntry,
    MigrationUnit,
    RunReport,
)
from pbmigrate.domain.exceptions import (
    AlreadyAppliedError,
    MigrationRunError,
    UnknownMigrationError,
)
from pbmigrate.domain.services.schema_store import SchemaStore

logger = get_logger(__name__)


def _ordered(units: Iterable[MigrationUnit]) -> list[MigrationUnit]:
    ordered = sorted(units, key=lambda u: u.sort_key)
    seen: set[str] = set()
    for unit in ordered:
        if unit.name in seen:
            raise ValueError(f"Duplicate migration name '{unit.name}'")
        seen.add(unit.name)
    return ordered


class MigrationRunner:
    """Runs migration units against a schema store."""

    def __init__(self, store: SchemaStore, lock_owner: str | None = None) -> None:
        """Initialize the runner.

        Args:
            store: Schema store the units are run against.
            lock_owner: Identifier written to the store lock. Defaults to
                the configured lock owner.
        """
        self.store = store
        self.lock_owner = lock_owner or get_settings().lock_owner

    async def apply_pending(self, units: Sequence[MigrationUnit]) -> RunReport:
        """Apply every unit not yet recorded in the ledger, oldest first.

        Args:
            units: Known migration units, in any order.

        Returns:
            Report of the run. Already applied units are listed as skipped.

        Raises:
            MigrationRunError: If a unit fails. Units applied before it stay applied.
            MigrationLockError: If another runner holds the store lock.
        """
        ordered = _ordered(units)
        report = RunReport(direction=MigrationDirection.UP)

        with LoggingContext(run_id=f"run_{uuid.uuid4().hex[:12]}", direction="up"):
            async with self.store.lock(self.lock_owner):
                applied = {record.file for record in await self.store.applied_migrations()}
                pending = [unit for unit in ordered if unit.name not in applied]
                report.total = len(pending)
                for unit in ordered:
                    if unit.name in applied:
                        report.skipped.append(unit.name)
                        report.states[unit.name] = MigrationState.APPLIED
                    else:
                        report.states[unit.name] = MigrationState.PENDING

                logger.info(
                    "Applying migrations",
                    pending=len(pending),
                    skipped=len(report.skipped),
                )

                for unit in pending:
                    try:
                        await self._apply_unit(unit)
                    except AlreadyAppliedError:
                        # Recorded by someone else between listing and applying
                        logger.info("Migration already applied, skipping", migration=unit.name)
                        report.total -= 1
                        report.skipped.append(unit.name)
                        report.states[unit.name] = MigrationState.APPLIED
                        continue
                    except Exception as e:
                        report.failed_unit = unit.name
                        report.error = e
                        report.states[unit.name] = MigrationState.FAILED
                        logger.error(
                            "Migration failed",
                            migration=unit.name,
                            error=str(e),
                            error_type=type(e).__name__,
                        )
                        raise MigrationRunError(report) from e

                    report.applied.append(unit.name)
                    report.states[unit.name] = MigrationState.APPLIED

        logger.info("Migrations applied", applied=report.count, skipped=len(report.skipped))
        return report

    async def revert_last(self, units: Sequence[MigrationUnit], n: int = 1) -> RunReport:
        """Revert the last ``n`` applied units, newest first.

        Args:
            units: Known migration units, used to resolve ledger entries.
            n: Number of applied units to revert.

        Returns:
            Report of the run.

        Raises:
            ValueError: If n is smaller than 1.
            MigrationRunError: If a unit fails or a ledger entry has no unit.
            MigrationLockError: If another runner holds the store lock.
        """
        if n < 1:
            raise ValueError("n must be at least 1")

        known = {unit.name: unit for unit in _ordered(units)}
        report = RunReport(direction=MigrationDirection.DOWN)

        with LoggingContext(run_id=f"run_{uuid.uuid4().hex[:12]}", direction="down"):
            async with self.store.lock(self.lock_owner):
                records = await self.store.applied_migrations()
                targets = [record.file for record in reversed(records)][:n]
                report.total = len(targets)
                for file in targets:
                    report.states[file] = MigrationState.APPLIED

                logger.info("Reverting migrations", count=len(targets))

                for file in targets:
                    try:
                        unit = known.get(file)
                        if unit is None:
                            raise UnknownMigrationError(file)
                        await self._revert_unit(unit)
                    except Exception as e:
                        report.failed_unit = file
                        report.error = e
                        report.states[file] = MigrationState.REVERT_FAILED
                        logger.error(
                            "Migration revert failed",
                            migration=file,
                            error=str(e),
                            error_type=type(e).__name__,
                        )
                        raise MigrationRunError(report) from e

                    report.applied.append(file)
                    report.states[file] = MigrationState.REVERTED

        logger.info("Migrations reverted", reverted=report.count)
        return report

    async def status(self, units: Sequence[MigrationUnit]) -> list[MigrationStatusEntry]:
        """Return the applied/pending state of every known unit, oldest first."""
        applied = {record.file: record.applied for record in await self.store.applied_migrations()}
        return [
            MigrationStatusEntry(
                id=unit.id,
                name=unit.name,
                state=MigrationState.APPLIED if unit.name in applied else MigrationState.PENDING,
                applied_at=applied.get(unit.name),
            )
            for unit in _ordered(units)
        ]

    async def orphaned(self, units: Sequence[MigrationUnit]) -> list[str]:
        """Return ledger entries that have no matching unit."""
        known = {unit.name for unit in units}
        return [
            record.file
            for record in await self.store.applied_migrations()
            if record.file not in known
        ]

    async def history_sync(self, units: Sequence[MigrationUnit]) -> list[str]:
        """Delete ledger entries whose migration file no longer exists.

        Returns:
            Names of the removed ledger entries.
        """
        async with self.store.lock(self.lock_owner):
            orphans = await self.orphaned(units)
            async with self.store.transaction():
                for file in orphans:
                    await self.store.remove_applied(file)

        logger.info("Migration history synced", removed=len(orphans))
        return orphans

    async def _apply_unit(self, unit: MigrationUnit) -> None:
        logger.info("Applying migration", migration=unit.name)
        async with self.store.transaction():
            await unit.apply(self.store)
            await self.store.record_applied(unit.name)
        logger.info("Migration applied", migration=unit.name)

    async def _revert_unit(self, unit: MigrationUnit) -> None:
        logger.info("Reverting migration", migration=unit.name)
        async with self.store.transaction():
            await unit.revert(self.store)
            await self.store.remove_applied(unit.name)
        logger.info("Migration reverted", migration=unit.name)
