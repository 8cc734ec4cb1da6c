"""Schema store abstraction.

A schema store holds collection definitions and the ledger of applied
migrations. Migration transforms only ever talk to a store handle passed in
explicitly; there is no global store.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from pbmigrate.domain.entities.collection import CollectionDefinition
from pbmigrate.domain.entities.migration import MigrationRecord
from pbmigrate.domain.exceptions import DuplicateFieldNameError


class SchemaStore(ABC):
    """Abstract base class for schema stores."""

    @abstractmethod
    async def find_collection_by_name_or_id(self, name_or_id: str) -> CollectionDefinition:
        """Return a detached copy of the collection with the given id or name.

        Ids are matched first; names are matched case-insensitively.

        Raises:
            CollectionNotFoundError: If no collection matches.
        """
        ...

    @abstractmethod
    async def list_collections(self) -> list[CollectionDefinition]:
        """Return detached copies of all collections ordered by name."""
        ...

    @abstractmethod
    async def save_collection(self, collection: CollectionDefinition) -> None:
        """Persist the whole collection definition, replacing the stored one.

        Raises:
            PersistenceError: If the write fails.
        """
        ...

    @abstractmethod
    async def applied_migrations(self) -> list[MigrationRecord]:
        """Return ledger records in application order (oldest first)."""
        ...

    @abstractmethod
    async def record_applied(self, file: str) -> None:
        """Add a ledger record for the given migration."""
        ...

    @abstractmethod
    async def remove_applied(self, file: str) -> None:
        """Delete the ledger record for the given migration."""
        ...

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Scope in which all writes are committed together or not at all."""
        ...

    @abstractmethod
    def lock(self, owner: str) -> AbstractAsyncContextManager[None]:
        """Hold the run-level exclusive lock for the duration of the scope.

        Raises:
            MigrationLockError: If another owner holds the lock.
        """
        ...

    @abstractmethod
    async def break_lock(self) -> str | None:
        """Release the run-level lock whoever holds it.

        Used to recover after a runner died without releasing its lock.

        Returns:
            The previous owner, or None if the lock was free.
        """
        ...

    async def is_applied(self, file: str) -> bool:
        records = await self.applied_migrations()
        return any(record.file == file for record in records)

    @staticmethod
    def ensure_saveable(collection: CollectionDefinition) -> None:
        """Check the collection invariants that must hold before any write.

        Raises:
            DuplicateFieldNameError: If two fields share a name.
        """
        seen: set[str] = set()
        for definition in collection.fields:
            name = definition.name.lower()
            if name in seen:
                raise DuplicateFieldNameError(collection.name, definition.name)
            seen.add(name)
