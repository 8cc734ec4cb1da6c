"""SQLAlchemy models for pbmigrate system tables.

All models inherit from the Base class defined in database.py.
"""

from pbmigrate.infrastructure.persistence.models.collection import CollectionModel
from pbmigrate.infrastructure.persistence.models.migration import (
    MigrationLockModel,
    MigrationModel,
)

__all__ = [
    "CollectionModel",
    "MigrationLockModel",
    "MigrationModel",
]
