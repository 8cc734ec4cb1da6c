"""SQL implementation of the schema store.

Collections live in the _collections table (field schema serialised as
JSON), the ledger in _migrations and the run lock in _migration_lock. All
operations share one AsyncSession; transaction() commits it.
"""

import json
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pbmigrate.core.logging import get_logger
from pbmigrate.domain.entities.collection import CollectionDefinition, FieldDefinition
from pbmigrate.domain.entities.migration import MigrationRecord
from pbmigrate.domain.exceptions import (
    AlreadyAppliedError,
    CollectionNotFoundError,
    MigrationLockError,
    PersistenceError,
)
from pbmigrate.domain.services.schema_store import SchemaStore
from pbmigrate.infrastructure.persistence.models import CollectionModel
from pbmigrate.infrastructure.persistence.repositories import (
    CollectionRepository,
    MigrationRepository,
)

logger = get_logger(__name__)


def _to_entity(model: CollectionModel) -> CollectionDefinition:
    try:
        raw_fields = json.loads(model.schema or "[]")
        fields = [FieldDefinition.from_dict(f) for f in raw_fields]
    except (ValueError, KeyError, TypeError) as e:
        raise PersistenceError(f"Stored schema of collection '{model.name}' is invalid: {e}", e) from e

    return CollectionDefinition(
        id=model.id,
        name=model.name,
        type=model.type,
        system=model.system,
        fields=fields,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SqlSchemaStore(SchemaStore):
    """Schema store backed by SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the store.

        Args:
            session: SQLAlchemy async session used for every operation.
        """
        self.session = session
        self.collections = CollectionRepository(session)
        self.migrations = MigrationRepository(session)

    async def find_collection_by_name_or_id(self, name_or_id: str) -> CollectionDefinition:
        try:
            model = await self.collections.get_by_name_or_id(name_or_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load collection '{name_or_id}': {e}", e) from e
        if model is None:
            raise CollectionNotFoundError(name_or_id)
        return _to_entity(model)

    async def list_collections(self) -> list[CollectionDefinition]:
        try:
            models = await self.collections.list_all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list collections: {e}", e) from e
        return [_to_entity(model) for model in models]

    async def save_collection(self, collection: CollectionDefinition) -> None:
        self.ensure_saveable(collection)
        schema = json.dumps([f.to_dict() for f in collection.fields])

        try:
            model = await self.collections.get_by_id(collection.id)
            if model is None:
                await self.collections.create(
                    CollectionModel(
                        id=collection.id,
                        name=collection.name,
                        type=collection.type,
                        system=collection.system,
                        schema=schema,
                    )
                )
            else:
                model.name = collection.name
                model.type = collection.type
                model.system = collection.system
                model.schema = schema
                await self.collections.update(model)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to save collection",
                collection_id=collection.id,
                collection_name=collection.name,
                error=str(e),
            )
            raise PersistenceError(f"Failed to save collection '{collection.name}': {e}", e) from e

        collection.updated_at = datetime.now(timezone.utc)

    async def applied_migrations(self) -> list[MigrationRecord]:
        try:
            rows = await self.migrations.list_applied()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read applied migrations: {e}", e) from e
        return [MigrationRecord(file=row.file, applied=row.applied) for row in rows]

    async def record_applied(self, file: str) -> None:
        try:
            await self.migrations.add(file)
        except IntegrityError as e:
            raise AlreadyAppliedError(file) from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to record migration '{file}': {e}", e) from e

    async def remove_applied(self, file: str) -> None:
        try:
            await self.migrations.delete(file)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to remove migration '{file}': {e}", e) from e

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[None, None]:
        try:
            yield
        except BaseException:
            await self.session.rollback()
            raise

        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(f"Failed to commit transaction: {e}", e) from e

    @asynccontextmanager
    async def lock(self, owner: str) -> AsyncGenerator[None, None]:
        await self._acquire_lock(owner)

        logger.debug("Migration lock acquired", owner=owner)
        try:
            yield
        finally:
            try:
                await self.migrations.delete_lock(owner)
                await self.session.commit()
            except SQLAlchemyError as e:
                await self.session.rollback()
                raise PersistenceError(f"Failed to release migration lock: {e}", e) from e
            logger.debug("Migration lock released", owner=owner)

    async def break_lock(self) -> str | None:
        try:
            existing = await self.migrations.get_lock()
            if existing is None:
                return None
            previous_owner = existing.owner
            await self.migrations.delete_lock()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(f"Failed to release migration lock: {e}", e) from e

        logger.warning("Migration lock released by force", previous_owner=previous_owner)
        return previous_owner

    async def _acquire_lock(self, owner: str) -> None:
        try:
            await self.migrations.create_lock(owner)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            try:
                existing = await self.migrations.get_lock()
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to read migration lock: {e}", e) from e
            raise MigrationLockError(existing.owner if existing else None)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(f"Failed to acquire migration lock: {e}", e) from e
