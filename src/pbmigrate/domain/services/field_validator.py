"""Field validation service for collection schema changes.

Validates field definitions before a migration writes them: ids, names,
and the relation options consumed by record validation elsewhere.
"""

import re
from dataclasses import dataclass

from pbmigrate.domain.entities.collection import (
    CollectionDefinition,
    FieldDefinition,
    FieldType,
    RelationOptions,
)

# Field names reserved for record system attributes
RESERVED_FIELD_NAMES = frozenset({
    "id",
    "created",
    "updated",
    "collectionid",
    "collectionname",
    "expand",
})

# Pattern for valid field names
NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")

# Pattern for valid field ids
ID_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


@dataclass
class FieldValidationError:
    """A single field validation error."""

    field: str
    message: str
    code: str


class FieldValidator:
    """Validator for field definitions written by migrations."""

    MAX_FIELD_NAME_LENGTH = 255
    MAX_FIELD_ID_LENGTH = 100

    @classmethod
    def validate_id(cls, field_id: str) -> list[FieldValidationError]:
        errors = []

        if not field_id:
            errors.append(
                FieldValidationError(field="id", message="Field id is required", code="field_id_required")
            )
            return errors

        if len(field_id) > cls.MAX_FIELD_ID_LENGTH:
            errors.append(
                FieldValidationError(
                    field="id",
                    message=f"Field id must be at most {cls.MAX_FIELD_ID_LENGTH} characters",
                    code="field_id_too_long",
                )
            )

        if not ID_PATTERN.match(field_id):
            errors.append(
                FieldValidationError(
                    field="id",
                    message="Field id must contain only alphanumeric characters and underscores",
                    code="field_id_invalid_format",
                )
            )

        return errors

    @classmethod
    def validate_name(cls, name: str) -> list[FieldValidationError]:
        """Validate a field name.

        Args:
            name: The field name to validate.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []

        if not name:
            errors.append(
                FieldValidationError(field="name", message="Field name is required", code="field_name_required")
            )
            return errors

        if len(name) > cls.MAX_FIELD_NAME_LENGTH:
            errors.append(
                FieldValidationError(
                    field="name",
                    message=f"Field name must be at most {cls.MAX_FIELD_NAME_LENGTH} characters",
                    code="field_name_too_long",
                )
            )

        if not NAME_PATTERN.match(name):
            errors.append(
                FieldValidationError(
                    field="name",
                    message="Field name must start with a letter and contain only alphanumeric characters and underscores",
                    code="field_name_invalid_format",
                )
            )

        if name.lower() in RESERVED_FIELD_NAMES:
            errors.append(
                FieldValidationError(
                    field="name",
                    message=f"Field name '{name}' is reserved and cannot be used",
                    code="field_name_reserved",
                )
            )

        return errors

    @classmethod
    def validate_relation_options(cls, options: object) -> list[FieldValidationError]:
        """Validate the options of a relation field.

        Args:
            options: The field's options value.

        Returns:
            List of validation errors (empty if valid).
        """
        if not isinstance(options, RelationOptions):
            return [
                FieldValidationError(
                    field="options",
                    message="Relation field requires relation options",
                    code="relation_options_required",
                )
            ]

        errors = []

        if not options.collection_id:
            errors.append(
                FieldValidationError(
                    field="options.collectionId",
                    message="Relation field requires 'collectionId' (target collection id)",
                    code="relation_collection_required",
                )
            )

        if options.max_select is not None and options.max_select < 1:
            errors.append(
                FieldValidationError(
                    field="options.maxSelect",
                    message="maxSelect must be at least 1",
                    code="relation_max_select_invalid",
                )
            )

        if options.min_select is not None and options.min_select < 0:
            errors.append(
                FieldValidationError(
                    field="options.minSelect",
                    message="minSelect must not be negative",
                    code="relation_min_select_invalid",
                )
            )

        if (
            options.min_select is not None
            and options.max_select is not None
            and options.min_select > options.max_select
        ):
            errors.append(
                FieldValidationError(
                    field="options.minSelect",
                    message="minSelect must not be greater than maxSelect",
                    code="relation_select_range_invalid",
                )
            )

        if options.display_fields is not None and any(not name for name in options.display_fields):
            errors.append(
                FieldValidationError(
                    field="options.displayFields",
                    message="displayFields must not contain empty names",
                    code="relation_display_fields_invalid",
                )
            )

        return errors

    @classmethod
    def validate_field(cls, definition: FieldDefinition) -> list[FieldValidationError]:
        """Validate a single field definition.

        Args:
            definition: The field definition.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []
        errors.extend(cls.validate_id(definition.id))
        errors.extend(cls.validate_name(definition.name))

        if definition.type is FieldType.RELATION:
            errors.extend(cls.validate_relation_options(definition.options))
        elif isinstance(definition.options, RelationOptions):
            errors.append(
                FieldValidationError(
                    field="options",
                    message=f"Relation options are not valid for '{definition.type.value}' fields",
                    code="field_options_invalid",
                )
            )

        return errors

    @classmethod
    def validate_collection(cls, collection: CollectionDefinition) -> list[FieldValidationError]:
        """Validate all fields of a collection, including name uniqueness.

        Args:
            collection: The collection definition.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []
        seen_names: set[str] = set()
        for i, definition in enumerate(collection.fields):
            for error in cls.validate_field(definition):
                errors.append(
                    FieldValidationError(
                        field=f"schema[{i}].{error.field}", message=error.message, code=error.code
                    )
                )

            name = definition.name.lower()
            if name and name in seen_names:
                errors.append(
                    FieldValidationError(
                        field=f"schema[{i}].name",
                        message=f"Duplicate field name '{definition.name}'",
                        code="field_name_duplicate",
                    )
                )
            seen_names.add(name)

        return errors
