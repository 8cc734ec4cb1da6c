"""Migration unit, ledger record and run report entities."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable

if TYPE_CHECKING:
    from pbmigrate.domain.services.schema_store import SchemaStore

Transform = Callable[["SchemaStore"], Awaitable[None]]

# <unix timestamp>_<snake_case_name>
MIGRATION_NAME_PATTERN = re.compile(r"^(\d+)_([a-zA-Z0-9_]+)$")


class MigrationDirection(str, Enum):
    """Direction a unit is run in."""

    UP = "up"
    DOWN = "down"


class MigrationState(str, Enum):
    """Lifecycle state of a unit within a run."""

    PENDING = "pending"
    APPLIED = "applied"
    FAILED = "failed"
    REVERTED = "reverted"
    REVERT_FAILED = "revert_failed"


@dataclass(frozen=True)
class MigrationUnit:
    """A named, ordered pair of schema transforms.

    Attributes:
        id: Ordering key, the timestamp prefix of the migration name.
        name: Migration name without extension, e.g. "1701871781_updated_projects".
        up: Transform applying the change.
        down: Transform restoring the previous schema.
        description: Optional human readable description.
    """

    id: int
    name: str
    up: Transform = field(compare=False, repr=False)
    down: Transform = field(compare=False, repr=False)
    description: str = field(default="", compare=False)

    @classmethod
    def from_name(
        cls, name: str, up: Transform, down: Transform, description: str = ""
    ) -> "MigrationUnit":
        """Build a unit, deriving its ordering key from the name's timestamp prefix.

        Raises:
            ValueError: If the name is not "<timestamp>_<name>".
        """
        match = MIGRATION_NAME_PATTERN.match(name)
        if not match:
            raise ValueError(
                f"Invalid migration name '{name}', expected '<timestamp>_<name>'"
            )
        return cls(id=int(match.group(1)), name=name, up=up, down=down, description=description)

    @property
    def sort_key(self) -> tuple[int, str]:
        return (self.id, self.name)

    async def apply(self, store: "SchemaStore") -> None:
        """Run the up transform against the store."""
        await self.up(store)

    async def revert(self, store: "SchemaStore") -> None:
        """Run the down transform against the store."""
        await self.down(store)


@dataclass(frozen=True)
class MigrationRecord:
    """Ledger entry for an applied migration."""

    file: str
    applied: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class MigrationStatusEntry:
    """Status line for a known migration."""

    id: int
    name: str
    state: MigrationState
    applied_at: datetime | None = None


@dataclass
class RunReport:
    """Outcome of a runner invocation.

    Attributes:
        direction: Whether units were applied or reverted.
        total: Number of units considered by the run.
        applied: Names of units processed successfully, in run order.
        skipped: Names of units skipped because they were already applied.
        failed_unit: Name of the unit that failed, if any.
        error: The error that stopped the run, if any.
        states: State of every unit the run considered, keyed by name.
    """

    direction: MigrationDirection
    total: int = 0
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed_unit: str | None = None
    error: Exception | None = None
    states: dict[str, MigrationState] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def count(self) -> int:
        return len(self.applied)

    def summary(self) -> str:
        verb = "applied" if self.direction is MigrationDirection.UP else "reverted"
        text = f"{verb} {self.count} of {self.total}"
        if self.failed_unit is not None:
            reason = getattr(self.error, "message", None) or str(self.error)
            text += f", failed at unit {self.failed_unit}: {reason}"
        return text
