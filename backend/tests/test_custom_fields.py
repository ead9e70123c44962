import pytest

from backend.field_order_module.catalog import get_standard_fields
from backend.field_order_module.custom_fields import (
    create_field_definition,
    delete_field_definition,
    get_field_definitions,
    get_fields_by_category,
    reorder_fields,
    to_custom_field,
    update_field_definition,
)
from backend.field_order_module.errors import DuplicateField, FieldNotFound, NotAuthorized
from backend.field_order_module.layout import get_merged_fields
from backend.field_order_module.merge import DEFAULT_CUSTOM_SORT_ORDER
from backend.field_order_module.models import CampusScope, EntityType
from backend.field_order_module.schemas import CustomFieldCreateRequest, CustomFieldUpdateRequest, FieldOrderOverride
from backend.field_order_module.store import save_field_orders


def make_field(db, school_id, field_key, **overrides):
    data = {
        "entity_type": EntityType.STUDENT,
        "category_id": "personal",
        "category_name": "Personal Information",
        "field_key": field_key,
        "label": (field_key or "generated").replace("_", " ").title(),
        "type": "text",
        "sort_order": 20,
    }
    data.update(overrides)
    return create_field_definition(db, school_id=school_id, payload=CustomFieldCreateRequest(**data))


def test_visibility_follows_campus_scope(db, schools):
    make_field(db, schools["north"], "own_field")
    make_field(db, schools["main"], "parent_everywhere", campus_scope=CampusScope.ALL_CAMPUSES)
    make_field(db, schools["main"], "parent_only")
    make_field(
        db,
        schools["other"],
        "shared_with_north",
        campus_scope=CampusScope.SELECTED_CAMPUSES,
        applicable_school_ids=[schools["north"]],
    )
    make_field(db, schools["other"], "unrelated", campus_scope=CampusScope.ALL_CAMPUSES)

    visible = {row.field_key for row in get_field_definitions(db, school_id=schools["north"], entity_type="student")}

    assert visible == {"own_field", "parent_everywhere", "shared_with_north"}


def test_inactive_and_other_entity_fields_are_hidden(db, schools):
    field = make_field(db, schools["main"], "retired")
    make_field(db, schools["main"], "teacher_only", entity_type=EntityType.TEACHER)
    delete_field_definition(db, field_id=field.id, school_id=schools["main"])

    assert get_field_definitions(db, school_id=schools["main"], entity_type="student") == []


def test_create_generates_field_key_when_missing(db, schools):
    field = make_field(db, schools["main"], None)

    assert field.field_key.startswith("personal_")
    assert field.is_active is True


def test_create_rejects_duplicate_key(db, schools):
    make_field(db, schools["main"], "nickname")

    with pytest.raises(DuplicateField):
        make_field(db, schools["main"], "nickname")


def test_update_requires_ownership(db, schools):
    field = make_field(db, schools["main"], "nickname")

    with pytest.raises(NotAuthorized):
        update_field_definition(
            db, field_id=field.id, school_id=schools["other"], payload=CustomFieldUpdateRequest(label="Alias")
        )
    with pytest.raises(FieldNotFound):
        update_field_definition(
            db, field_id="missing", school_id=schools["main"], payload=CustomFieldUpdateRequest(label="Alias")
        )


def test_update_changes_only_given_attributes(db, schools):
    field = make_field(db, schools["main"], "nickname", required=True)

    updated = update_field_definition(
        db, field_id=field.id, school_id=schools["main"], payload=CustomFieldUpdateRequest(sort_order=35)
    )

    assert updated.sort_order == 35
    assert updated.required is True
    assert updated.label == "Nickname"


def test_reorder_uses_list_index(db, schools):
    first = make_field(db, schools["main"], "first", sort_order=50)
    second = make_field(db, schools["main"], "second", sort_order=10)

    reorder_fields(db, school_id=schools["main"], category_id="personal", ordered_ids=[first.id, second.id])

    grouped = get_fields_by_category(db, school_id=schools["main"], entity_type="student")
    assert [(row.field_key, row.sort_order) for row in grouped["personal"]] == [("first", 0), ("second", 1)]


def test_to_custom_field_carries_merge_inputs(db, schools):
    field = make_field(db, schools["main"], "notes", type="long-text", options=["a"], sort_order=None)

    converted = to_custom_field(field)

    assert converted.field_key == "notes"
    assert converted.category_id == "personal"
    assert converted.sort_order == 0
    assert converted.options == ("a",)


def test_merged_fields_apply_stored_orders_and_custom_fields(db, schools):
    save_field_orders(
        db,
        school_id=schools["main"],
        entity_type="student",
        overrides=[FieldOrderOverride(category_id="personal", field_label="Surname", sort_order=25)],
    )
    make_field(db, schools["main"], "middle_name", sort_order=20)

    merged = get_merged_fields(db, school_id=schools["main"], entity_type="student", categories=["personal"])
    ids = [item.id for item in merged]

    assert ids[:4] == ["firstName", "middle_name", "fatherName", "lastName"]
    by_id = {item.id: item.sort_order for item in merged}
    assert by_id["middle_name"] == 20
    assert by_id["fatherName"] == 21
    assert by_id["lastName"] == 25
    assert all(item.category == "personal" for item in merged)


def test_merged_fields_default_to_all_categories(db, schools):
    merged = get_merged_fields(db, school_id=schools["main"], entity_type="teacher")

    assert {item.category for item in merged} == {"personal", "professional", "qualifications", "system"}


def test_default_layout_without_custom_fields_keeps_catalog_orders(db, schools):
    merged = get_merged_fields(db, school_id=schools["main"], entity_type="teacher")

    expected = [(item.id, item.sort_order) for item in get_standard_fields(EntityType.TEACHER)]
    assert [(item.id, item.sort_order) for item in merged] == expected
    assert not any(item.is_custom for item in merged)


def test_layout_sections_follow_requested_category_order(db, schools):
    make_field(db, schools["main"], "blood_donor", category_id="medical", sort_order=10)

    merged = get_merged_fields(db, school_id=schools["main"], entity_type="student", categories=["medical", "personal"])
    medical = [(item.id, item.sort_order) for item in merged if item.category == "medical"]

    assert merged[0].category == "medical"
    assert merged[-1].category == "personal"
    assert medical == [("blood_donor", 10), ("bloodGroup", 11), ("hasAllergies", 20), ("allergiesList", 30), ("medicalNotes", 40)]
    assert [item.sort_order for item in merged if item.category == "personal"][:2] == [10, 20]


def test_unset_sort_order_groups_last_like_the_merged_form(db, schools):
    unset = make_field(db, schools["main"], "unset_field", sort_order=5)
    make_field(db, schools["main"], "placed_field", sort_order=30)
    update_field_definition(
        db, field_id=unset.id, school_id=schools["main"], payload=CustomFieldUpdateRequest(sort_order=None)
    )

    grouped = get_fields_by_category(db, school_id=schools["main"], entity_type="student")
    merged = get_merged_fields(db, school_id=schools["main"], entity_type="student", categories=["personal"])

    assert [row.field_key for row in grouped["personal"]] == ["placed_field", "unset_field"]
    assert merged[-1].id == "unset_field"
    assert merged[-1].sort_order == DEFAULT_CUSTOM_SORT_ORDER
