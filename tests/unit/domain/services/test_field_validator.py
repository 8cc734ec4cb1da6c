"""Unit tests for FieldValidator."""

import pytest

from pbmigrate.domain.entities import (
    CollectionDefinition,
    FieldDefinition,
    FieldType,
    RelationOptions,
)
from pbmigrate.domain.services.field_validator import FieldValidator


def _codes(errors):
    return [e.code for e in errors]


class TestValidateId:

    def test_valid_id(self):
        assert FieldValidator.validate_id("2wfeykhs") == []

    def test_empty_id(self):
        assert _codes(FieldValidator.validate_id("")) == ["field_id_required"]

    def test_too_long_id(self):
        errors = FieldValidator.validate_id("a" * 101)
        assert "field_id_too_long" in _codes(errors)

    def test_invalid_characters(self):
        assert _codes(FieldValidator.validate_id("abc-def")) == ["field_id_invalid_format"]


class TestValidateName:

    def test_valid_name(self):
        assert FieldValidator.validate_name("selectedPlan") == []

    def test_empty_name(self):
        assert _codes(FieldValidator.validate_name("")) == ["field_name_required"]

    @pytest.mark.parametrize("name", ["1plan", "_plan", "selected plan", "plan-id"])
    def test_invalid_format(self, name):
        assert "field_name_invalid_format" in _codes(FieldValidator.validate_name(name))

    @pytest.mark.parametrize("name", ["id", "created", "Updated", "collectionId", "expand"])
    def test_reserved_names(self, name):
        assert "field_name_reserved" in _codes(FieldValidator.validate_name(name))

    def test_too_long_name(self):
        errors = FieldValidator.validate_name("a" * 256)
        assert "field_name_too_long" in _codes(errors)


class TestValidateRelationOptions:

    def test_valid_options(self):
        options = RelationOptions(collection_id="s7nhljkrmzzu8y6", max_select=1)
        assert FieldValidator.validate_relation_options(options) == []

    def test_plain_dict_rejected(self):
        errors = FieldValidator.validate_relation_options({"collectionId": "abc"})
        assert _codes(errors) == ["relation_options_required"]

    def test_missing_collection_id(self):
        errors = FieldValidator.validate_relation_options(RelationOptions(collection_id=""))
        assert _codes(errors) == ["relation_collection_required"]

    def test_max_select_below_one(self):
        errors = FieldValidator.validate_relation_options(
            RelationOptions(collection_id="c1", max_select=0)
        )
        assert "relation_max_select_invalid" in _codes(errors)

    def test_negative_min_select(self):
        errors = FieldValidator.validate_relation_options(
            RelationOptions(collection_id="c1", min_select=-1)
        )
        assert _codes(errors) == ["relation_min_select_invalid"]

    def test_min_greater_than_max(self):
        errors = FieldValidator.validate_relation_options(
            RelationOptions(collection_id="c1", min_select=3, max_select=1)
        )
        assert _codes(errors) == ["relation_select_range_invalid"]

    def test_empty_display_field(self):
        errors = FieldValidator.validate_relation_options(
            RelationOptions(collection_id="c1", display_fields=("name", ""))
        )
        assert _codes(errors) == ["relation_display_fields_invalid"]


class TestValidateField:

    def test_relation_without_options(self):
        definition = FieldDefinition(id="r1", name="plan", type=FieldType.RELATION)
        assert _codes(FieldValidator.validate_field(definition)) == ["relation_options_required"]

    def test_relation_options_on_text_field(self):
        definition = FieldDefinition(
            id="t1",
            name="title",
            type=FieldType.TEXT,
            options=RelationOptions(collection_id="c1"),
        )
        assert _codes(FieldValidator.validate_field(definition)) == ["field_options_invalid"]

    def test_collects_all_errors(self):
        definition = FieldDefinition(id="bad id", name="id", type=FieldType.TEXT)
        codes = _codes(FieldValidator.validate_field(definition))
        assert codes == ["field_id_invalid_format", "field_name_reserved"]


class TestValidateCollection:

    def test_valid_collection(self, projects_collection):
        assert FieldValidator.validate_collection(projects_collection) == []

    def test_duplicate_names_case_insensitive(self):
        collection = CollectionDefinition(
            id="c1",
            name="projects",
            fields=[
                FieldDefinition(id="f1", name="title", type=FieldType.TEXT),
                FieldDefinition(id="f2", name="Title", type=FieldType.TEXT),
            ],
        )

        errors = FieldValidator.validate_collection(collection)

        assert _codes(errors) == ["field_name_duplicate"]
        assert errors[0].field == "schema[1].name"

    def test_prefixes_field_errors_with_index(self):
        collection = CollectionDefinition(
            id="c1",
            name="projects",
            fields=[
                FieldDefinition(id="f1", name="title", type=FieldType.TEXT),
                FieldDefinition(id="f2", name="expand", type=FieldType.TEXT),
            ],
        )

        errors = FieldValidator.validate_collection(collection)

        assert errors[0].field == "schema[1].name"
        assert errors[0].code == "field_name_reserved"
