"""Domain entities for pbmigrate.

Entities are pure Python dataclasses that represent schema and migration
concepts. They have no dependencies on infrastructure or external frameworks.
"""

from pbmigrate.domain.entities.collection import (
    CollectionDefinition,
    FieldDefinition,
    FieldType,
    RelationOptions,
)
from pbmigrate.domain.entities.migration import (
    MigrationDirection,
    MigrationRecord,
    MigrationState,
    MigrationStatusEntry,
    MigrationUnit,
    RunReport,
    Transform,
)

__all__ = [
    "CollectionDefinition",
    "FieldDefinition",
    "FieldType",
    "MigrationDirection",
    "MigrationRecord",
    "MigrationState",
    "MigrationStatusEntry",
    "MigrationUnit",
    "RelationOptions",
    "RunReport",
    "Transform",
]
