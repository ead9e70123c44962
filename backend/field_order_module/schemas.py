from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .merge import MergedField
from .models import CampusScope, EntityType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldOrderItem(CamelModel):
    field_label: str = Field(min_length=1, max_length=255)
    sort_order: int


class FieldOrderOverride(FieldOrderItem):
    category_id: str = Field(min_length=1, max_length=100)


class CategoryFieldOrdersRequest(CamelModel):
    fields: list[FieldOrderItem]
    campus_id: str | None = None


class FieldOrdersRequest(CamelModel):
    fields: list[FieldOrderOverride]
    campus_id: str | None = None


class FieldOrderOut(CamelModel):
    id: int
    tenant_id: str
    entity_type: EntityType
    category_id: str
    field_label: str
    sort_order: int


class FieldOrderListResponse(CamelModel):
    success: bool = True
    data: list[FieldOrderOut]


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class CustomFieldCreateRequest(CamelModel):
    entity_type: EntityType
    category_id: str = Field(min_length=1, max_length=100)
    category_name: str = Field(min_length=1, max_length=255)
    field_key: str | None = Field(default=None, max_length=150)
    label: str = Field(min_length=1, max_length=255)
    type: str = Field(min_length=1, max_length=50)
    options: list[str] = Field(default_factory=list)
    required: bool = False
    sort_order: int | None = None
    category_order: int = 0
    campus_scope: CampusScope = CampusScope.THIS_CAMPUS
    applicable_school_ids: list[str] = Field(default_factory=list)
    campus_id: str | None = None


class CustomFieldUpdateRequest(CamelModel):
    category_id: str | None = Field(default=None, min_length=1, max_length=100)
    category_name: str | None = Field(default=None, min_length=1, max_length=255)
    field_key: str | None = Field(default=None, min_length=1, max_length=150)
    label: str | None = Field(default=None, min_length=1, max_length=255)
    type: str | None = Field(default=None, min_length=1, max_length=50)
    options: list[str] | None = None
    required: bool | None = None
    sort_order: int | None = None
    category_order: int | None = None
    campus_scope: CampusScope | None = None
    applicable_school_ids: list[str] | None = None
    is_active: bool | None = None


class CustomFieldReorderRequest(CamelModel):
    category_id: str = Field(min_length=1, max_length=100)
    ordered_ids: list[str]
    campus_id: str | None = None


class CustomFieldOut(CamelModel):
    id: str
    school_id: str
    entity_type: EntityType
    category_id: str
    category_name: str
    field_key: str
    label: str
    type: str
    options: list[str]
    required: bool
    sort_order: int | None
    category_order: int
    campus_scope: CampusScope
    applicable_school_ids: list[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CustomFieldResponse(CamelModel):
    success: bool = True
    data: CustomFieldOut


class CustomFieldListResponse(CamelModel):
    success: bool = True
    data: list[CustomFieldOut]


class CustomFieldGroupResponse(CamelModel):
    success: bool = True
    data: dict[str, list[CustomFieldOut]]


class MergedFieldOut(CamelModel):
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
    options: list[str] = Field(default_factory=list)

    @classmethod
    def from_field(cls, merged: MergedField) -> "MergedFieldOut":
        return cls.model_validate(merged.to_dict())


class MergedFieldListResponse(CamelModel):
    success: bool = True
    data: list[MergedFieldOut]
