"""Unit tests for MigrationGenerator."""

import pytest

from pbmigrate.domain.entities import FieldDefinition, FieldType, RelationOptions
from pbmigrate.infrastructure.migrations import MigrationGenerator, MigrationLoader
from pbmigrate.infrastructure.persistence.memory_schema_store import InMemorySchemaStore
from pbmigrate.infrastructure.migrations.generator import normalize_migration_name


@pytest.mark.parametrize(
    "name,expected",
    [
        ("updated_projects", "updated_projects"),
        ("Updated Projects", "updated_projects"),
        ("  add-plan relation!  ", "add_plan_relation"),
    ],
)
def test_normalize_migration_name(name, expected):
    assert normalize_migration_name(name) == expected


def test_normalize_rejects_empty_name():
    with pytest.raises(ValueError):
        normalize_migration_name(" -- ")


def test_create_writes_template(tmp_path):
    path = MigrationGenerator(tmp_path / "pb_migrations").create(
        "updated projects", timestamp=1701871781
    )

    assert path.name == "1701871781_updated_projects.py"
    content = path.read_text()
    assert content.startswith('"""Updated projects"""')
    assert "async def up(store: SchemaStore) -> None:" in content
    assert "async def down(store: SchemaStore) -> None:" in content


def test_created_file_is_loadable(tmp_path):
    MigrationGenerator(tmp_path).create("add_plan", timestamp=1700000000)

    units = MigrationLoader(tmp_path).load()

    assert [u.name for u in units] == ["1700000000_add_plan"]
    assert units[0].description == "Add plan"


def test_create_refuses_to_overwrite(tmp_path):
    generator = MigrationGenerator(tmp_path)
    generator.create("add_plan", timestamp=1700000000)

    with pytest.raises(FileExistsError):
        generator.create("add_plan", timestamp=1700000000)


def test_create_defaults_timestamp_to_now(tmp_path, monkeypatch):
    monkeypatch.setattr("pbmigrate.infrastructure.migrations.generator.time.time", lambda: 1234.5)

    path = MigrationGenerator(tmp_path).create("add_plan")

    assert path.name == "1234_add_plan.py"


@pytest.mark.asyncio
async def test_snapshot_recreates_collections(tmp_path, projects_collection):
    projects_collection.add_field(
        FieldDefinition(
            id="2wfeykhs",
            name="selectedPlan",
            type=FieldType.RELATION,
            options=RelationOptions(collection_id="s7nhljkrmzzu8y6", max_select=1),
        )
    )

    path = MigrationGenerator(tmp_path).create_snapshot([projects_collection], timestamp=1701871790)

    assert path.name == "1701871790_collections_snapshot.py"
    [unit] = MigrationLoader(tmp_path).load()
    assert unit.description == "Collections snapshot"

    store = InMemorySchemaStore()
    await unit.apply(store)

    restored = await store.find_collection_by_name_or_id("projects")
    assert restored.id == projects_collection.id
    assert restored.fields == projects_collection.fields


@pytest.mark.asyncio
async def test_snapshot_replaces_changed_collection(tmp_path, projects_collection, memory_store):
    snapshot = projects_collection.copy()
    snapshot.remove_field("m4h1qzpk")
    MigrationGenerator(tmp_path).create_snapshot([snapshot], timestamp=1701871790)
    [unit] = MigrationLoader(tmp_path).load()

    await unit.apply(memory_store)
    await unit.revert(memory_store)

    stored = await memory_store.find_collection_by_name_or_id("projects")
    assert [f.id for f in stored.fields] == ["u0qgjbvn"]


@pytest.mark.asyncio
async def test_empty_snapshot_is_a_noop(tmp_path, memory_store):
    MigrationGenerator(tmp_path).create_snapshot([], timestamp=1701871790)
    [unit] = MigrationLoader(tmp_path).load()

    await unit.apply(memory_store)

    assert memory_store.save_count == 0
    assert [c.name for c in await memory_store.list_collections()] == ["projects"]
