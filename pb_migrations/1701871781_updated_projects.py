"""Make the selectedPlan relation on projects optional.

Down rewrites the field back to required=True. The field itself is kept in
both directions, so the collection moves between "optional" and "required"
rather than between "present" and "absent".
"""

from pbmigrate.domain.entities import FieldDefinition, FieldType, RelationOptions
from pbmigrate.domain.services import SchemaStore, add_field, update_field

PROJECTS_COLLECTION_ID = "7kff2zw80a7rmbu"

SELECTED_PLAN = FieldDefinition(
    id="2wfeykhs",
    name="selectedPlan",
    type=FieldType.RELATION,
    system=False,
    required=False,
    presentable=False,
    unique=False,
    options=RelationOptions(
        collection_id="s7nhljkrmzzu8y6",
        cascade_delete=False,
        min_select=None,
        max_select=1,
        display_fields=None,
    ),
)


async def up(store: SchemaStore) -> None:
    await add_field(store, PROJECTS_COLLECTION_ID, SELECTED_PLAN)


async def down(store: SchemaStore) -> None:
    await update_field(store, PROJECTS_COLLECTION_ID, SELECTED_PLAN.with_changes(required=True))
