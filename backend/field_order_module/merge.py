"""Interleave platform (standard) fields with tenant-defined custom fields.

Standard field defaults are spaced by 10 so a custom field can claim a slot
between two of them. When a custom field asks for a slot a standard field
already holds, the custom field keeps it and the standard field moves to the
next integer. The move is computed on every call; stored orders are never
rewritten.
"""
from dataclasses import dataclass, replace
from typing import Any, Iterable, Union


DEFAULT_CUSTOM_SORT_ORDER = 1000
FULL_WIDTH_TYPES = frozenset({"long-text", "textarea"})


@dataclass(frozen=True)
class StandardField:
    id: str
    label: str
    type: str
    category: str
    sort_order: int
    required: bool = False
    width: str | None = None
    placeholder: str | None = None
    help: str | None = None
    default_value: Any = None
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class CustomField:
    field_key: str
    label: str
    type: str
    category_id: str
    sort_order: int | None = None
    required: bool = False
    options: tuple[str, ...] = ()


Field = Union[StandardField, CustomField]


@dataclass(frozen=True)
class MergedField:
    id: str
    label: str
    type: str
    category: str
    sort_order: int
    is_custom: bool = False
    field_key: str | None = None
    required: bool = False
    width: str | None = None
    placeholder: str | None = None
    help: str | None = None
    default_value: Any = None
    options: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "category": self.category,
            "sortOrder": self.sort_order,
            "isCustom": self.is_custom,
            "required": self.required,
        }
        if self.is_custom:
            data["fieldKey"] = self.field_key
        if self.width is not None:
            data["width"] = self.width
        if self.placeholder is not None:
            data["placeholder"] = self.placeholder
        if self.help is not None:
            data["help"] = self.help
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        if self.options:
            data["options"] = list(self.options)
        return data


def normalize_field(item: Field) -> MergedField:
    if isinstance(item, CustomField):
        sort_order = item.sort_order if item.sort_order is not None else DEFAULT_CUSTOM_SORT_ORDER
        return MergedField(
            id=item.field_key,
            label=item.label,
            type=item.type,
            category=item.category_id,
            sort_order=sort_order,
            is_custom=True,
            field_key=item.field_key,
            required=item.required,
            width="full" if item.type in FULL_WIDTH_TYPES else "half",
            options=tuple(item.options),
        )
    return MergedField(
        id=item.id,
        label=item.label,
        type=item.type,
        category=item.category,
        sort_order=item.sort_order,
        required=item.required,
        width=item.width,
        placeholder=item.placeholder,
        help=item.help,
        default_value=item.default_value,
        options=tuple(item.options),
    )


def merge_and_sort_fields(
    standard_fields: Iterable[StandardField],
    custom_fields: Iterable[CustomField],
    categories: Iterable[str],
) -> list[MergedField]:
    """Return the standard and custom fields of ``categories`` as one ordered list.

    Fields outside ``categories`` are dropped. Fields are bucketed by their
    requested sort order; inside a bucket holding more than one field the
    custom fields are emitted first with their order untouched, then the
    standard fields are assigned ``order + 1``, ``order + 2``, ... in input
    order. The result is sorted by the final order; ties keep emission order,
    so custom fields sharing a slot stay in input order.
    """
    wanted = set(categories)
    if not wanted:
        return []

    candidates = [normalize_field(item) for item in standard_fields if item.category in wanted]
    candidates.extend(normalize_field(item) for item in custom_fields if item.category_id in wanted)

    buckets: dict[int, list[MergedField]] = {}
    for merged in candidates:
        buckets.setdefault(merged.sort_order, []).append(merged)

    resolved: list[MergedField] = []
    for order in sorted(buckets):
        bucket = buckets[order]
        if len(bucket) == 1:
            resolved.append(bucket[0])
            continue
        resolved.extend(merged for merged in bucket if merged.is_custom)
        standards = [merged for merged in bucket if not merged.is_custom]
        resolved.extend(
            replace(merged, sort_order=order + index + 1) for index, merged in enumerate(standards)
        )

    resolved.sort(key=lambda merged: merged.sort_order)
    return resolved
