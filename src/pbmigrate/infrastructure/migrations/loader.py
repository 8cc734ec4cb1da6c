"""Discovery of migration files.

A migration file is a Python module named "<unix timestamp>_<name>.py"
defining module-level ``async def up(store)`` and ``async def down(store)``.
Files are returned ordered by timestamp, then name.
"""

import importlib.util
import inspect
import re
from pathlib import Path
from types import ModuleType

from pbmigrate.core.logging import get_logger
from pbmigrate.domain.entities.migration import MigrationUnit
from pbmigrate.domain.exceptions import MigrationLoadError

logger = get_logger(__name__)

MIGRATION_FILE_PATTERN = re.compile(r"^\d+_[a-zA-Z0-9_]+\.py$")


class MigrationLoader:
    """Loads migration units from a directory."""

    def __init__(self, migrations_dir: str | Path) -> None:
        self.migrations_dir = Path(migrations_dir)

    def migration_files(self) -> list[Path]:
        """List migration files ordered by timestamp, then name."""
        if not self.migrations_dir.is_dir():
            logger.warning("Migrations directory not found", path=str(self.migrations_dir))
            return []

        files = [
            path
            for path in self.migrations_dir.iterdir()
            if path.is_file() and MIGRATION_FILE_PATTERN.match(path.name)
        ]
        return sorted(files, key=lambda p: (int(p.name.split("_", 1)[0]), p.name))

    def load(self) -> list[MigrationUnit]:
        """Import every migration file and build its unit.

        Raises:
            MigrationLoadError: If a file cannot be imported or lacks up/down.
        """
        units = [self.load_file(path) for path in self.migration_files()]
        logger.debug(
            "Loaded migrations",
            path=str(self.migrations_dir),
            count=len(units),
        )
        return units

    def load_file(self, path: Path) -> MigrationUnit:
        module = self._import(path)

        for attr in ("up", "down"):
            transform = getattr(module, attr, None)
            if transform is None:
                raise MigrationLoadError(str(path), f"missing '{attr}' function")
            if not inspect.iscoroutinefunction(transform):
                raise MigrationLoadError(str(path), f"'{attr}' must be an async function")

        description = (module.__doc__ or "").strip().splitlines()
        return MigrationUnit.from_name(
            path.stem,
            module.up,
            module.down,
            description=description[0] if description else "",
        )

    def _import(self, path: Path) -> ModuleType:
        module_name = f"pbmigrate_migrations.{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise MigrationLoadError(str(path), "not an importable Python file")

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise MigrationLoadError(str(path), f"{type(e).__name__}: {e}") from e
        return module
