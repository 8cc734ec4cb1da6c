"""Migration file discovery and generation."""

from pbmigrate.infrastructure.migrations.generator import (
    MigrationGenerator,
    normalize_migration_name,
)
from pbmigrate.infrastructure.migrations.loader import MigrationLoader

__all__ = [
    "MigrationGenerator",
    "MigrationLoader",
    "normalize_migration_name",
]
