from collections.abc import Iterable

from sqlalchemy.orm import Session

from .catalog import apply_field_orders, get_standard_fields, list_categories
from .custom_fields import get_field_definitions, to_custom_field
from .merge import MergedField, merge_and_sort_fields
from .models import EntityType
from .store import get_field_orders, parse_entity_type


def get_merged_fields(
    db: Session,
    *,
    school_id: str,
    entity_type: str | EntityType,
    categories: Iterable[str] | None = None,
) -> list[MergedField]:
    """Merged form layout, one category section after another.

    Each category is merged on its own, so sort orders only compete inside a
    section and standard fields keep their slots unless a custom field claims one.
    """
    entity_type = parse_entity_type(entity_type)
    wanted = list(dict.fromkeys(categories)) if categories else list_categories(entity_type)

    orders = get_field_orders(db, school_id=school_id, entity_type=entity_type)
    standard = apply_field_orders(get_standard_fields(entity_type), orders)
    custom = [to_custom_field(row) for row in get_field_definitions(db, school_id=school_id, entity_type=entity_type)]

    layout: list[MergedField] = []
    for category in wanted:
        layout.extend(merge_and_sort_fields(standard, custom, [category]))
    return layout
