"""Integration tests for SqlSchemaStore on an in-memory SQLite database."""

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pbmigrate.domain.entities import FieldDefinition, FieldType
from pbmigrate.domain.exceptions import (
    AlreadyAppliedError,
    CollectionNotFoundError,
    DuplicateFieldNameError,
    MigrationLockError,
    PersistenceError,
)
from pbmigrate.infrastructure.persistence.models import CollectionModel
from pbmigrate.infrastructure.persistence.sql_schema_store import SqlSchemaStore


@pytest.fixture
def store(db_session):
    return SqlSchemaStore(db_session)


@pytest_asyncio.fixture
async def seeded_store(store, projects_collection):
    async with store.transaction():
        await store.save_collection(projects_collection)
    return store


@pytest.mark.asyncio
async def test_save_and_find_collection(seeded_store, projects_collection):
    by_id = await seeded_store.find_collection_by_name_or_id("7kff2zw80a7rmbu")
    by_name = await seeded_store.find_collection_by_name_or_id("PROJECTS")

    assert by_id.fields == projects_collection.fields
    assert by_name.id == "7kff2zw80a7rmbu"
    assert by_id.created_at is not None


@pytest.mark.asyncio
async def test_find_missing_collection(store):
    with pytest.raises(CollectionNotFoundError):
        await store.find_collection_by_name_or_id("projects")


@pytest.mark.asyncio
async def test_save_updates_existing_row(seeded_store):
    collection = await seeded_store.find_collection_by_name_or_id("projects")
    collection.add_field(FieldDefinition(id="b7kq2mzn", name="budget", type=FieldType.NUMBER))

    async with seeded_store.transaction():
        await seeded_store.save_collection(collection)

    stored = await seeded_store.find_collection_by_name_or_id("projects")
    assert [f.id for f in stored.fields] == ["u0qgjbvn", "m4h1qzpk", "b7kq2mzn"]


@pytest.mark.asyncio
async def test_save_rejects_duplicate_names(seeded_store):
    collection = await seeded_store.find_collection_by_name_or_id("projects")
    collection.fields.append(FieldDefinition(id="z1", name="Name", type=FieldType.TEXT))

    with pytest.raises(DuplicateFieldNameError):
        await seeded_store.save_collection(collection)


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error(seeded_store):
    with pytest.raises(RuntimeError):
        async with seeded_store.transaction():
            collection = await seeded_store.find_collection_by_name_or_id("projects")
            collection.remove_field("m4h1qzpk")
            await seeded_store.save_collection(collection)
            await seeded_store.record_applied("1_a")
            raise RuntimeError("boom")

    stored = await seeded_store.find_collection_by_name_or_id("projects")
    assert len(stored.fields) == 2
    assert await seeded_store.applied_migrations() == []


@pytest.mark.asyncio
async def test_ledger(store):
    async with store.transaction():
        await store.record_applied("1_a")
        await store.record_applied("2_b")

    assert [r.file for r in await store.applied_migrations()] == ["1_a", "2_b"]

    with pytest.raises(AlreadyAppliedError):
        await store.record_applied("1_a")
    await store.session.rollback()

    async with store.transaction():
        await store.remove_applied("1_a")

    assert [r.file for r in await store.applied_migrations()] == ["2_b"]


@pytest.mark.asyncio
async def test_corrupt_schema_raises_persistence_error(store, db_session):
    db_session.add(CollectionModel(id="c0rrupt0", name="broken", schema="{not json"))
    await db_session.commit()

    with pytest.raises(PersistenceError):
        await store.find_collection_by_name_or_id("broken")


@pytest.mark.asyncio
async def test_lock(store, db_engine):
    other_session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async with store.lock("runner-a"):
        async with other_session_factory() as other_session:
            other = SqlSchemaStore(other_session)
            with pytest.raises(MigrationLockError) as exc_info:
                async with other.lock("runner-b"):
                    pass
        assert exc_info.value.owner == "runner-a"

    assert await store.migrations.get_lock() is None


@pytest.mark.asyncio
async def test_break_lock_releases_stale_lock(store):
    await store.migrations.create_lock("crashed-runner")
    await store.session.commit()

    assert await store.break_lock() == "crashed-runner"
    assert await store.migrations.get_lock() is None

    async with store.lock("runner-a"):
        pass


@pytest.mark.asyncio
async def test_break_lock_when_free(store):
    assert await store.break_lock() is None


@pytest.mark.asyncio
async def test_list_collections(seeded_store):
    plans = await seeded_store.find_collection_by_name_or_id("projects")
    plans.id = "s7nhljkrmzzu8y6"
    plans.name = "plans"
    async with seeded_store.transaction():
        await seeded_store.save_collection(plans)

    collections = await seeded_store.list_collections()

    assert [c.name for c in collections] == ["plans", "projects"]
    assert collections[1].fields[0].name == "name"


@pytest.mark.asyncio
async def test_save_after_find_reuses_loaded_row(seeded_store, db_engine):
    collection = await seeded_store.find_collection_by_name_or_id("7kff2zw80a7rmbu")
    statements = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(db_engine.sync_engine, "before_cursor_execute", _record)
    try:
        collection.add_field(FieldDefinition(id="b7kq2mzn", name="budget", type=FieldType.NUMBER))
        async with seeded_store.transaction():
            await seeded_store.save_collection(collection)
    finally:
        event.remove(db_engine.sync_engine, "before_cursor_execute", _record)

    assert not [s for s in statements if s.lstrip().upper().startswith("SELECT")]
    assert any(s.lstrip().upper().startswith("UPDATE") for s in statements)


@pytest_asyncio.fixture
async def uninitialised_store():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield SqlSchemaStore(session)
    await engine.dispose()


@pytest.mark.asyncio
async def test_missing_tables_raise_persistence_error(uninitialised_store):
    with pytest.raises(PersistenceError):
        await uninitialised_store.find_collection_by_name_or_id("projects")
    with pytest.raises(PersistenceError):
        await uninitialised_store.list_collections()
    with pytest.raises(PersistenceError):
        await uninitialised_store.applied_migrations()
    with pytest.raises(PersistenceError, match="Failed to acquire migration lock"):
        async with uninitialised_store.lock("runner-a"):
            pass
    with pytest.raises(PersistenceError):
        await uninitialised_store.break_lock()
