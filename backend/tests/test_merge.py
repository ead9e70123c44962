from dataclasses import replace

import pytest

from backend.field_order_module.merge import (
    DEFAULT_CUSTOM_SORT_ORDER,
    CustomField,
    MergedField,
    StandardField,
    merge_and_sort_fields,
    normalize_field,
)


def standard(field_id, sort_order, category="personal", **extra):
    return StandardField(id=field_id, label=field_id.title(), type="text", category=category, sort_order=sort_order, **extra)


def custom(field_key, sort_order, category_id="personal", type="text"):
    return CustomField(field_key=field_key, label=field_key.title(), type=type, category_id=category_id, sort_order=sort_order)


def orders(fields):
    return [(item.id, item.sort_order) for item in fields]


def test_custom_field_inserted_between_standard_fields():
    result = merge_and_sort_fields(
        [standard("first_name", 10), standard("last_name", 20)],
        [custom("middle_name", 20)],
        ["personal"],
    )

    assert orders(result) == [("first_name", 10), ("middle_name", 20), ("last_name", 21)]
    assert [item.is_custom for item in result] == [False, True, False]
    assert result[1].field_key == "middle_name"


def test_custom_field_keeps_slot_and_standard_moves_up_one():
    result = merge_and_sort_fields([standard("email", 30)], [custom("nickname", 30)], ["personal"])

    assert orders(result) == [("nickname", 30), ("email", 31)]


def test_two_standards_colliding_with_custom_get_consecutive_slots():
    result = merge_and_sort_fields(
        [standard("a", 20), standard("b", 20)],
        [custom("c", 20)],
        ["personal"],
    )

    assert orders(result) == [("c", 20), ("a", 21), ("b", 22)]


def test_without_custom_fields_output_is_filtered_sorted_standards():
    fields = [standard("c", 30), standard("a", 10), standard("x", 5, category="medical"), standard("b", 20)]

    result = merge_and_sort_fields(fields, [], ["personal"])

    assert orders(result) == [("a", 10), ("b", 20), ("c", 30)]
    assert not any(item.is_custom for item in result)
    assert all(item.field_key is None for item in result)


def test_fields_outside_categories_are_dropped_even_when_colliding():
    result = merge_and_sort_fields(
        [standard("first_name", 10), standard("blood_group", 10, category="medical")],
        [custom("hobby", 10, category_id="extra"), custom("nickname", 20)],
        ["personal"],
    )

    assert orders(result) == [("first_name", 10), ("nickname", 20)]


def test_empty_categories_returns_empty_list():
    assert merge_and_sort_fields([standard("a", 10)], [custom("b", 10)], []) == []


def test_output_length_matches_inputs_in_requested_categories():
    standards = [standard("a", 10), standard("b", 20, category="contact"), standard("c", 30, category="medical")]
    customs = [custom("d", 10), custom("e", 25, category_id="contact"), custom("f", 5, category_id="medical")]

    result = merge_and_sort_fields(standards, customs, {"personal", "contact"})

    assert len(result) == 4
    assert {item.id for item in result} == {"a", "b", "d", "e"}


def test_sort_orders_are_distinct_and_ascending_for_spaced_catalog():
    standards = [standard(f"s{n}", n * 10) for n in range(1, 8)]
    customs = [custom("c1", 20), custom("c2", 45), custom("c3", 70), custom("c4", 1)]

    result = merge_and_sort_fields(standards, customs, ["personal"])
    values = [item.sort_order for item in result]

    assert values == sorted(values)
    assert len(values) == len(set(values))


def test_custom_ties_keep_input_order():
    result = merge_and_sort_fields(
        [standard("a", 10)],
        [custom("second", 10), custom("first", 10)],
        ["personal"],
    )

    assert orders(result) == [("second", 10), ("first", 10), ("a", 11)]


def test_repeated_calls_are_identical_and_inputs_untouched():
    standards = [standard("first_name", 10), standard("last_name", 20)]
    customs = [custom("middle_name", 20)]
    snapshot = (list(standards), list(customs))

    first = merge_and_sort_fields(standards, customs, ["personal"])
    second = merge_and_sort_fields(standards, customs, ["personal"])

    assert first == second
    assert (standards, customs) == snapshot
    assert standards[1].sort_order == 20


@pytest.mark.parametrize(
    ("field_type", "width"),
    [("long-text", "full"), ("textarea", "full"), ("text", "half"), ("select", "half")],
)
def test_custom_width_follows_type(field_type, width):
    (merged,) = merge_and_sort_fields([], [custom("notes", 10, type=field_type)], ["personal"])

    assert merged.width == width


def test_custom_field_without_sort_order_goes_last():
    merged = normalize_field(replace(custom("late", 0), sort_order=None))

    assert merged.sort_order == DEFAULT_CUSTOM_SORT_ORDER


def test_standard_field_attributes_pass_through():
    item = standard("country", 50, required=True, width="half", placeholder="Country", default_value="Pakistan")

    merged = normalize_field(item)

    assert merged == MergedField(
        id="country",
        label="Country",
        type="text",
        category="personal",
        sort_order=50,
        required=True,
        width="half",
        placeholder="Country",
        default_value="Pakistan",
    )


def test_to_dict_uses_wire_names():
    result = merge_and_sort_fields([standard("first_name", 10)], [custom("middle_name", 10)], ["personal"])

    assert result[0].to_dict() == {
        "id": "middle_name",
        "label": "Middle_Name",
        "type": "text",
        "category": "personal",
        "sortOrder": 10,
        "isCustom": True,
        "required": False,
        "fieldKey": "middle_name",
        "width": "half",
    }
    assert "fieldKey" not in result[1].to_dict()
    assert result[1].to_dict()["isCustom"] is False


def test_pushed_standard_can_share_a_slot_claimed_by_the_next_custom():
    result = merge_and_sort_fields(
        [standard("a", 20)],
        [custom("c20", 20), custom("c21", 21)],
        ["personal"],
    )

    assert orders(result) == [("c20", 20), ("a", 21), ("c21", 21)]
