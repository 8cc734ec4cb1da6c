"""Collection and field entities for schema definitions.

Collections are named schemas holding an ordered list of typed fields.
Field definitions are immutable values; a schema change always replaces a
field with a new definition rather than mutating it in place.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pbmigrate.domain.exceptions import FieldNotFoundError


class FieldType(str, Enum):
    """Supported field types for collection schemas."""

    TEXT = "text"
    NUMBER = "number"
    BOOL = "bool"
    EMAIL = "email"
    URL = "url"
    EDITOR = "editor"
    DATE = "date"
    SELECT = "select"
    JSON = "json"
    FILE = "file"
    RELATION = "relation"


@dataclass(frozen=True)
class RelationOptions:
    """Options of a relation field.

    Attributes:
        collection_id: Id of the collection the relation points to.
        cascade_delete: Delete referencing records when the target is deleted.
        min_select: Minimum number of selected records (None = no minimum).
        max_select: Maximum number of selected records (1 = single relation,
            None = unlimited).
        display_fields: Target fields shown when presenting the relation.
    """

    collection_id: str
    cascade_delete: bool = False
    min_select: int | None = None
    max_select: int | None = None
    display_fields: tuple[str, ...] | None = None

    @property
    def is_multiple(self) -> bool:
        return self.max_select is None or self.max_select > 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "collectionId": self.collection_id,
            "cascadeDelete": self.cascade_delete,
            "minSelect": self.min_select,
            "maxSelect": self.max_select,
            "displayFields": list(self.display_fields) if self.display_fields is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RelationOptions":
        display_fields = data.get("displayFields")
        return cls(
            collection_id=data.get("collectionId", ""),
            cascade_delete=bool(data.get("cascadeDelete", False)),
            min_select=data.get("minSelect"),
            max_select=data.get("maxSelect"),
            display_fields=tuple(display_fields) if display_fields is not None else None,
        )


@dataclass(frozen=True)
class FieldDefinition:
    """A single typed, constrained attribute of a collection.

    Attributes:
        id: Stable field id. Never changes once the field exists.
        name: Field name, unique within the collection.
        type: Field type tag.
        system: Whether the field is managed by the system.
        required: Whether records must set a value.
        presentable: Whether the field is shown when presenting records.
        unique: Whether values must be unique across records.
        options: RelationOptions for relation fields, a plain mapping otherwise.
    """

    id: str
    name: str
    type: FieldType
    system: bool = False
    required: bool = False
    presentable: bool = False
    unique: bool = False
    options: RelationOptions | dict[str, Any] = field(default_factory=dict)

    def with_changes(self, **changes: Any) -> "FieldDefinition":
        """Return a copy of the field with the given attributes changed."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        options = self.options.to_dict() if isinstance(self.options, RelationOptions) else dict(self.options)
        return {
            "system": self.system,
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
            "presentable": self.presentable,
            "unique": self.unique,
            "options": options,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldDefinition":
        field_type = FieldType(data["type"])
        raw_options = data.get("options") or {}
        options: RelationOptions | dict[str, Any]
        if field_type is FieldType.RELATION:
            options = RelationOptions.from_dict(raw_options)
        else:
            options = dict(raw_options)
        return cls(
            id=data["id"],
            name=data["name"],
            type=field_type,
            system=bool(data.get("system", False)),
            required=bool(data.get("required", False)),
            presentable=bool(data.get("presentable", False)),
            unique=bool(data.get("unique", False)),
            options=options,
        )


@dataclass
class CollectionDefinition:
    """A named schema holding typed field definitions.

    Attributes:
        id: Stable collection id.
        name: Human readable collection name.
        fields: Ordered field definitions, unique by id.
        type: Collection type ("base", "auth" or "view").
        system: Whether the collection is managed by the system.
        created_at: Timestamp when the collection was created.
        updated_at: Timestamp when the collection was last saved.
    """

    id: str
    name: str
    fields: list[FieldDefinition] = field(default_factory=list)
    type: str = "base"
    system: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """Validate collection data after initialization."""
        if not self.id:
            raise ValueError("Collection ID is required")
        if not self.name:
            raise ValueError("Collection name is required")
        seen: set[str] = set()
        for f in self.fields:
            if f.id in seen:
                raise ValueError(f"Duplicate field id '{f.id}' in collection '{self.name}'")
            seen.add(f.id)

    def get_field_by_id(self, field_id: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    def get_field_by_name(self, name: str) -> FieldDefinition | None:
        """Find a field by name (case-insensitive)."""
        lowered = name.lower()
        for f in self.fields:
            if f.name.lower() == lowered:
                return f
        return None

    def add_field(self, new_field: FieldDefinition) -> None:
        """Add a field, replacing in place any field with the same id."""
        for i, f in enumerate(self.fields):
            if f.id == new_field.id:
                self.fields[i] = new_field
                return
        self.fields.append(new_field)

    def replace_field(self, new_field: FieldDefinition) -> FieldDefinition:
        """Replace an existing field by id and return the previous definition.

        Raises:
            FieldNotFoundError: If no field has the new field's id.
        """
        for i, f in enumerate(self.fields):
            if f.id == new_field.id:
                self.fields[i] = new_field
                return f
        raise FieldNotFoundError(self.name, new_field.id)

    def remove_field(self, field_id: str) -> FieldDefinition:
        """Remove a field by id and return it.

        Raises:
            FieldNotFoundError: If no field has the given id.
        """
        for i, f in enumerate(self.fields):
            if f.id == field_id:
                return self.fields.pop(i)
        raise FieldNotFoundError(self.name, field_id)

    def copy(self) -> "CollectionDefinition":
        """Return a copy whose field list can be changed independently."""
        return replace(self, fields=list(self.fields))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "system": self.system,
            "schema": [f.to_dict() for f in self.fields],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CollectionDefinition":
        return cls(
            id=data["id"],
            name=data["name"],
            type=data.get("type", "base"),
            system=bool(data.get("system", False)),
            fields=[FieldDefinition.from_dict(f) for f in data.get("schema", [])],
        )
