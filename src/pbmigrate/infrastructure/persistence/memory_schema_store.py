"""In-memory schema store.

Keeps collections and the ledger in plain dicts and lists. Transactions
snapshot the state on entry and restore it if the scope raises.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Iterable

from pbmigrate.domain.entities.collection import CollectionDefinition
from pbmigrate.domain.entities.migration import MigrationRecord
from pbmigrate.domain.exceptions import (
    AlreadyAppliedError,
    CollectionNotFoundError,
    MigrationLockError,
)
from pbmigrate.domain.services.schema_store import SchemaStore


class InMemorySchemaStore(SchemaStore):
    """Schema store holding its state in memory."""

    def __init__(self, collections: Iterable[CollectionDefinition] = ()) -> None:
        self._collections: dict[str, CollectionDefinition] = {
            c.id: c.copy() for c in collections
        }
        self._ledger: list[MigrationRecord] = []
        self._lock_owner: str | None = None
        self.save_count = 0

    @property
    def lock_owner(self) -> str | None:
        return self._lock_owner

    async def find_collection_by_name_or_id(self, name_or_id: str) -> CollectionDefinition:
        collection = self._collections.get(name_or_id)
        if collection is None:
            lowered = name_or_id.lower()
            collection = next(
                (c for c in self._collections.values() if c.name.lower() == lowered), None
            )
        if collection is None:
            raise CollectionNotFoundError(name_or_id)
        return collection.copy()

    async def list_collections(self) -> list[CollectionDefinition]:
        return [c.copy() for c in sorted(self._collections.values(), key=lambda c: c.name)]

    async def save_collection(self, collection: CollectionDefinition) -> None:
        self.ensure_saveable(collection)
        collection.updated_at = datetime.now(timezone.utc)
        self._collections[collection.id] = collection.copy()
        self.save_count += 1

    async def applied_migrations(self) -> list[MigrationRecord]:
        return list(self._ledger)

    async def record_applied(self, file: str) -> None:
        if any(record.file == file for record in self._ledger):
            raise AlreadyAppliedError(file)
        self._ledger.append(MigrationRecord(file=file))

    async def remove_applied(self, file: str) -> None:
        self._ledger = [record for record in self._ledger if record.file != file]

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[None, None]:
        collections = {key: c.copy() for key, c in self._collections.items()}
        ledger = list(self._ledger)
        try:
            yield
        except BaseException:
            self._collections = collections
            self._ledger = ledger
            raise

    @asynccontextmanager
    async def lock(self, owner: str) -> AsyncGenerator[None, None]:
        if self._lock_owner is not None:
            raise MigrationLockError(self._lock_owner)
        self._lock_owner = owner
        try:
            yield
        finally:
            self._lock_owner = None

    async def break_lock(self) -> str | None:
        owner, self._lock_owner = self._lock_owner, None
        return owner
