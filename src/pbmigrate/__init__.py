"""pbmigrate - reversible collection schema migrations.

Migration units are timestamp-ordered pairs of async up/down transforms
run against an explicit schema store by the migration runner.
"""

__version__ = "0.1.0"

from pbmigrate.application.services.migration_runner import MigrationRunner
from pbmigrate.domain.entities import (
    CollectionDefinition,
    FieldDefinition,
    FieldType,
    MigrationUnit,
    RelationOptions,
    RunReport,
)
from pbmigrate.domain.services import SchemaStore

__all__ = [
    "CollectionDefinition",
    "FieldDefinition",
    "FieldType",
    "MigrationRunner",
    "MigrationUnit",
    "RelationOptions",
    "RunReport",
    "SchemaStore",
    "__version__",
]
