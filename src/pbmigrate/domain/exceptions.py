"""Exceptions raised by migration units, schema stores and the runner."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pbmigrate.domain.entities.migration import RunReport


class MigrationError(Exception):
    """Base class for all migration errors."""

    code = "migration_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CollectionNotFoundError(MigrationError):
    """Raised when a collection lookup by name or id finds nothing."""

    code = "collection_not_found"

    def __init__(self, name_or_id: str) -> None:
        self.name_or_id = name_or_id
        super().__init__(f"Collection '{name_or_id}' not found")


class FieldNotFoundError(MigrationError):
    """Raised when a field id is missing from a collection."""

    code = "field_not_found"

    def __init__(self, collection: str, field_id: str) -> None:
        self.collection = collection
        self.field_id = field_id
        super().__init__(f"Field '{field_id}' not found in collection '{collection}'")


class DuplicateFieldIdError(MigrationError):
    """Raised when a field id is already taken by a different field."""

    code = "duplicate_field_id"

    def __init__(self, collection: str, field_id: str) -> None:
        self.collection = collection
        self.field_id = field_id
        super().__init__(
            f"Field id '{field_id}' already exists in collection '{collection}'"
        )


class DuplicateFieldNameError(MigrationError):
    """Raised when another field in the collection already uses the name."""

    code = "duplicate_field_name"

    def __init__(self, collection: str, name: str) -> None:
        self.collection = collection
        self.name = name
        super().__init__(
            f"Field name '{name}' is already used in collection '{collection}'"
        )


class InvalidFieldError(MigrationError):
    """Raised when a field definition fails validation."""

    code = "invalid_field"

    def __init__(self, field_id: str, errors: list[str]) -> None:
        self.field_id = field_id
        self.errors = errors
        super().__init__(f"Invalid field '{field_id}': {'; '.join(errors)}")


class PersistenceError(MigrationError):
    """Raised when the schema store fails to write."""

    code = "persistence_error"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class AlreadyAppliedError(MigrationError):
    """Raised when a unit is already recorded in the ledger.

    The runner turns this into a skip; it is never reported as a failure.
    """

    code = "already_applied"

    def __init__(self, file: str) -> None:
        self.file = file
        super().__init__(f"Migration '{file}' is already applied")


class UnknownMigrationError(MigrationError):
    """Raised when the ledger references a migration file that is not loaded."""

    code = "unknown_migration"

    def __init__(self, file: str) -> None:
        self.file = file
        super().__init__(f"Applied migration '{file}' has no matching migration file")


class MigrationLoadError(MigrationError):
    """Raised when a migration file cannot be loaded."""

    code = "migration_load_failed"

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load migration '{path}': {reason}")


class MigrationLockError(MigrationError):
    """Raised when another runner holds the store lock."""

    code = "migration_locked"

    def __init__(self, owner: str | None) -> None:
        self.owner = owner
        super().__init__(f"Migrations are locked by '{owner or 'unknown'}'")


class MigrationRunError(MigrationError):
    """Raised by the runner when a unit fails mid-run.

    Carries the run report: which units were processed, which one failed,
    in which direction, and the underlying error.
    """

    code = "migration_run_failed"

    def __init__(self, report: "RunReport") -> None:
        self.report = report
        super().__init__(report.summary())
