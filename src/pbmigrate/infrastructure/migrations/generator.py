"""Generation of new migration files."""

import pprint
import re
import time
from pathlib import Path

from pbmigrate.core.logging import get_logger
from pbmigrate.domain.entities.collection import CollectionDefinition

logger = get_logger(__name__)

MIGRATION_TEMPLATE = '''"""{description}"""

from pbmigrate.domain.services import SchemaStore


async def up(store: SchemaStore) -> None:
    # add up queries...
    pass


async def down(store: SchemaStore) -> None:
    # add down queries...
    pass
'''

SNAPSHOT_TEMPLATE = '''"""Collections snapshot"""

from pbmigrate.domain.services import SchemaStore, import_collections

COLLECTIONS = {collections}


async def up(store: SchemaStore) -> None:
    await import_collections(store, COLLECTIONS)


async def down(store: SchemaStore) -> None:
    pass
'''

SNAPSHOT_NAME = "collections_snapshot"


def normalize_migration_name(name: str) -> str:
    """Turn a free-form name into a snake_case migration name.

    Raises:
        ValueError: If nothing usable remains.
    """
    normalized = re.sub(r"[^a-z0-9]+", "_", name.strip().lower()).strip("_")
    if not normalized:
        raise ValueError(f"Invalid migration name '{name}'")
    return normalized


class MigrationGenerator:
    """Writes new migration files into a migrations directory."""

    def __init__(self, migrations_dir: str | Path) -> None:
        self.migrations_dir = Path(migrations_dir)

    def create(self, name: str, timestamp: int | None = None) -> Path:
        """Create a blank migration file.

        Args:
            name: Free-form migration name, e.g. "updated projects".
            timestamp: Unix timestamp used as ordering key. Defaults to now.

        Returns:
            Path of the created file.

        Raises:
            ValueError: If the name is empty after normalisation.
            FileExistsError: If the file already exists.
        """
        normalized = normalize_migration_name(name)
        content = MIGRATION_TEMPLATE.format(description=normalized.replace("_", " ").capitalize())
        return self._write(normalized, content, timestamp)

    def create_snapshot(
        self, collections: list[CollectionDefinition], timestamp: int | None = None
    ) -> Path:
        """Create a migration that recreates the given collections on up.

        The down transform is empty; reverting a snapshot leaves the
        collections as they are.

        Args:
            collections: Collections to capture, usually every stored one.
            timestamp: Unix timestamp used as ordering key. Defaults to now.

        Returns:
            Path of the created file.

        Raises:
            FileExistsError: If the file already exists.
        """
        data = [collection.to_dict() for collection in collections]
        content = SNAPSHOT_TEMPLATE.format(collections=pprint.pformat(data, sort_dicts=False))
        return self._write(SNAPSHOT_NAME, content, timestamp)

    def _write(self, name: str, content: str, timestamp: int | None) -> Path:
        timestamp = int(time.time()) if timestamp is None else timestamp
        path = self.migrations_dir / f"{timestamp}_{name}.py"

        self.migrations_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "x") as f:
            f.write(content)

        logger.info("Migration file created", path=str(path))
        return path
