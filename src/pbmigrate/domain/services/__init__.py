"""Domain services for pbmigrate.

Services contain schema logic that doesn't naturally fit within a single entity.
They have no dependencies on infrastructure or external frameworks.
"""

from pbmigrate.domain.services.field_operations import (
    add_field,
    field_migration,
    import_collections,
    remove_field,
    update_field,
)
from pbmigrate.domain.services.field_validator import (
    RESERVED_FIELD_NAMES,
    FieldValidationError,
    FieldValidator,
)
from pbmigrate.domain.services.schema_store import SchemaStore

__all__ = [
    "FieldValidationError",
    "FieldValidator",
    "RESERVED_FIELD_NAMES",
    "SchemaStore",
    "add_field",
    "field_migration",
    "import_collections",
    "remove_field",
    "update_field",
]
