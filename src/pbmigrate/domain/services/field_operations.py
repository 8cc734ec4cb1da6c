"""Schema operations used by migration transforms.

Each operation is one read and one write against a schema store: the
collection is loaded, changed in memory, and saved back as a whole.
Collection snapshots are imported without a read.
"""

from typing import Any

from pbmigrate.core.logging import get_logger
from pbmigrate.domain.entities.collection import CollectionDefinition, FieldDefinition
from pbmigrate.domain.entities.migration import MigrationUnit
from pbmigrate.domain.exceptions import (
    DuplicateFieldIdError,
    DuplicateFieldNameError,
    FieldNotFoundError,
    InvalidFieldError,
)
from pbmigrate.domain.services.field_validator import FieldValidator
from pbmigrate.domain.services.schema_store import SchemaStore

logger = get_logger(__name__)


def _ensure_valid(definition: FieldDefinition) -> None:
    errors = FieldValidator.validate_field(definition)
    if errors:
        raise InvalidFieldError(definition.id, [f"{e.field}: {e.message}" for e in errors])


def _ensure_name_free(collection: CollectionDefinition, definition: FieldDefinition) -> None:
    named = collection.get_field_by_name(definition.name)
    if named is not None and named.id != definition.id:
        raise DuplicateFieldNameError(collection.name, definition.name)


async def add_field(
    store: SchemaStore, collection_name_or_id: str, definition: FieldDefinition
) -> CollectionDefinition:
    """Add a field to a collection.

    A field whose id is free is appended. A field with the same id, name and
    type is rewritten to the new definition, so re-applying a change after
    its revert lands on the same configuration.

    Raises:
        InvalidFieldError: If the definition is invalid.
        CollectionNotFoundError: If the collection does not exist.
        DuplicateFieldIdError: If the id belongs to a different field.
        DuplicateFieldNameError: If another field already uses the name.
        PersistenceError: If saving fails.
    """
    _ensure_valid(definition)
    collection = await store.find_collection_by_name_or_id(collection_name_or_id)

    existing = collection.get_field_by_id(definition.id)
    if existing is not None and (
        existing.name != definition.name or existing.type is not definition.type
    ):
        raise DuplicateFieldIdError(collection.name, definition.id)
    _ensure_name_free(collection, definition)

    collection.add_field(definition)
    await store.save_collection(collection)

    logger.debug(
        "Field added",
        collection=collection.name,
        field_id=definition.id,
        field_name=definition.name,
        replaced=existing is not None,
    )
    return collection


async def update_field(
    store: SchemaStore, collection_name_or_id: str, definition: FieldDefinition
) -> CollectionDefinition:
    """Rewrite an existing field to the given definition.

    Raises:
        InvalidFieldError: If the definition is invalid.
        CollectionNotFoundError: If the collection does not exist.
        FieldNotFoundError: If no field has the definition's id.
        DuplicateFieldNameError: If another field already uses the name.
        PersistenceError: If saving fails.
    """
    _ensure_valid(definition)
    collection = await store.find_collection_by_name_or_id(collection_name_or_id)

    if collection.get_field_by_id(definition.id) is None:
        raise FieldNotFoundError(collection.name, definition.id)
    _ensure_name_free(collection, definition)

    previous = collection.replace_field(definition)
    await store.save_collection(collection)

    logger.debug(
        "Field updated",
        collection=collection.name,
        field_id=definition.id,
        field_name=definition.name,
        previous_name=previous.name,
    )
    return collection


async def remove_field(
    store: SchemaStore, collection_name_or_id: str, field_id: str
) -> CollectionDefinition:
    """Remove a field from a collection by id.

    Raises:
        CollectionNotFoundError: If the collection does not exist.
        FieldNotFoundError: If no field has the given id.
        PersistenceError: If saving fails.
    """
    collection = await store.find_collection_by_name_or_id(collection_name_or_id)
    removed = collection.remove_field(field_id)
    await store.save_collection(collection)

    logger.debug(
        "Field removed",
        collection=collection.name,
        field_id=field_id,
        field_name=removed.name,
    )
    return collection


def field_migration(
    name: str,
    collection_name_or_id: str,
    definition: FieldDefinition,
    previous: FieldDefinition | None = None,
) -> MigrationUnit:
    """Build a unit that sets a field on up and restores it on down.

    With ``previous`` the down transform rewrites the field to that
    definition (the field is kept). Without it the unit is an add/remove
    pair and down deletes the field.

    Args:
        name: Migration name, "<timestamp>_<name>".
        collection_name_or_id: Target collection.
        definition: Field definition written by up.
        previous: Field definition restored by down, if any.

    Returns:
        The migration unit.
    """
    if previous is not None and previous.id != definition.id:
        raise ValueError("previous definition must have the same field id")

    async def up(store: SchemaStore) -> None:
        await add_field(store, collection_name_or_id, definition)

    async def down(store: SchemaStore) -> None:
        if previous is None:
            await remove_field(store, collection_name_or_id, definition.id)
        else:
            await update_field(store, collection_name_or_id, previous)

    return MigrationUnit.from_name(name, up, down)


async def import_collections(
    store: SchemaStore, collections: list[dict[str, Any]]
) -> list[CollectionDefinition]:
    """Create or replace collections from their serialised definitions.

    Collections are matched by id; each one is stored whole, replacing any
    stored definition with the same id. Collections not listed are left alone.

    Args:
        store: Target schema store.
        collections: Collection dicts in the form produced by
            CollectionDefinition.to_dict().

    Returns:
        The imported collections.

    Raises:
        InvalidFieldError: If a collection has an invalid field.
        DuplicateFieldNameError: If a collection has two fields with one name.
        PersistenceError: If saving fails.
    """
    definitions = [CollectionDefinition.from_dict(data) for data in collections]
    for collection in definitions:
        errors = FieldValidator.validate_collection(collection)
        if errors:
            raise InvalidFieldError(collection.id, [f"{e.field}: {e.message}" for e in errors])

    for collection in definitions:
        await store.save_collection(collection)

    logger.info("Collections imported", count=len(definitions))
    return definitions
