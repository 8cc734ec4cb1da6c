"""Persistence repositories for database operations."""

from pbmigrate.infrastructure.persistence.repositories.collection_repository import (
    CollectionRepository,
)
from pbmigrate.infrastructure.persistence.repositories.migration_repository import (
    MigrationRepository,
)

__all__ = [
    "CollectionRepository",
    "MigrationRepository",
]
