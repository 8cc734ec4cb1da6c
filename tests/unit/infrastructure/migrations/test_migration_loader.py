"""Unit tests for MigrationLoader."""

import pytest

from pbmigrate.domain.exceptions import MigrationLoadError
from pbmigrate.infrastructure.migrations import MigrationLoader

VALID_MIGRATION = '''"""Add a field.

Longer description.
"""


async def up(store):
    pass


async def down(store):
    pass
'''


def _write(path, content=VALID_MIGRATION):
    path.write_text(content)
    return path


class TestMigrationFiles:

    def test_orders_by_numeric_timestamp_then_name(self, tmp_path):
        _write(tmp_path / "200_b.py")
        _write(tmp_path / "30_a.py")
        _write(tmp_path / "200_a.py")

        names = [p.name for p in MigrationLoader(tmp_path).migration_files()]

        assert names == ["30_a.py", "200_a.py", "200_b.py"]

    def test_ignores_non_migration_files(self, tmp_path):
        _write(tmp_path / "1_valid.py")
        _write(tmp_path / "helpers.py")
        _write(tmp_path / "1_notes.txt")
        (tmp_path / "2_directory.py").mkdir()

        names = [p.name for p in MigrationLoader(tmp_path).migration_files()]

        assert names == ["1_valid.py"]

    def test_missing_directory(self, tmp_path):
        assert MigrationLoader(tmp_path / "missing").migration_files() == []


class TestLoad:

    def test_builds_units(self, tmp_path):
        _write(tmp_path / "1700000000_add_field.py")

        units = MigrationLoader(tmp_path).load()

        assert len(units) == 1
        assert units[0].id == 1700000000
        assert units[0].name == "1700000000_add_field"
        assert units[0].description == "Add a field."

    def test_loads_shipped_migrations(self, migrations_dir):
        units = MigrationLoader(migrations_dir).load()

        assert [u.name for u in units] == ["1701871781_updated_projects"]
        assert units[0].id == 1701871781
        assert units[0].description == "Make the selectedPlan relation on projects optional."

    def test_missing_down(self, tmp_path):
        path = _write(tmp_path / "1_no_down.py", "async def up(store):\n    pass\n")

        with pytest.raises(MigrationLoadError) as exc_info:
            MigrationLoader(tmp_path).load_file(path)

        assert "missing 'down' function" in exc_info.value.message

    def test_sync_transform_rejected(self, tmp_path):
        path = _write(
            tmp_path / "1_sync.py",
            "async def up(store):\n    pass\n\n\ndef down(store):\n    pass\n",
        )

        with pytest.raises(MigrationLoadError, match="'down' must be an async function"):
            MigrationLoader(tmp_path).load_file(path)

    def test_import_error_wrapped(self, tmp_path):
        _write(tmp_path / "1_broken.py", "import does_not_exist_anywhere\n")

        with pytest.raises(MigrationLoadError) as exc_info:
            MigrationLoader(tmp_path).load()

        assert "ModuleNotFoundError" in exc_info.value.reason
        assert exc_info.value.path.endswith("1_broken.py")
