from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .catalog import get_standard_fields
from .custom_fields import (
    create_field_definition,
    delete_field_definition,
    get_field_definitions,
    get_fields_by_category,
    reorder_fields,
    update_field_definition,
)
from .database import get_db_session
from .errors import DuplicateField, FieldNotFound, FieldOrderError, NotAuthorized, StorageFailure, ValidationFailure
from .layout import get_merged_fields
from .merge import normalize_field
from .middleware import WRITE_ROLES, get_current_user, require_roles, resolve_school_id
from .models import CustomFieldDefinition, DefaultFieldOrder
from .schemas import (
    CategoryFieldOrdersRequest,
    CustomFieldCreateRequest,
    CustomFieldGroupResponse,
    CustomFieldListResponse,
    CustomFieldOut,
    CustomFieldReorderRequest,
    CustomFieldResponse,
    CustomFieldUpdateRequest,
    FieldOrderListResponse,
    FieldOrderOut,
    FieldOrderOverride,
    FieldOrdersRequest,
    MergedFieldListResponse,
    MergedFieldOut,
    MessageResponse,
)
from .security import CurrentUser
from .store import delete_field_orders, get_field_orders, parse_entity_type, reset_all_field_orders, save_field_orders

router = APIRouter(prefix="/api/v1", tags=["Field Ordering"])

ERROR_STATUS = {
    NotAuthorized: status.HTTP_403_FORBIDDEN,
    StorageFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
    ValidationFailure: status.HTTP_400_BAD_REQUEST,
    FieldNotFound: status.HTTP_404_NOT_FOUND,
    DuplicateField: status.HTTP_409_CONFLICT,
}


def _http_error(exc: FieldOrderError) -> HTTPException:
    return HTTPException(status_code=ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR), detail=str(exc))


def _field_order_out(row: DefaultFieldOrder) -> FieldOrderOut:
    return FieldOrderOut(
        id=row.id,
        tenant_id=row.school_id,
        entity_type=row.entity_type,
        category_id=row.category_id,
        field_label=row.field_label,
        sort_order=row.sort_order,
    )


def _custom_field_out(row: CustomFieldDefinition) -> CustomFieldOut:
    return CustomFieldOut(
        id=row.id,
        school_id=row.school_id,
        entity_type=row.entity_type,
        category_id=row.category_id,
        category_name=row.category_name,
        field_key=row.field_key,
        label=row.label,
        type=row.type,
        options=list(row.options or []),
        required=row.required,
        sort_order=row.sort_order,
        category_order=row.category_order,
        campus_scope=row.campus_scope,
        applicable_school_ids=list(row.applicable_school_ids or []),
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


@router.get("/default-field-orders/{entity_type}", response_model=FieldOrderListResponse)
def list_field_orders(
    entity_type: str,
    category_id: str | None = None,
    campus_id: str | None = None,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        school_id = resolve_school_id(db, current_user, campus_id)
        rows = get_field_orders(db, school_id=school_id, entity_type=entity_type, category_id=category_id)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return FieldOrderListResponse(data=[_field_order_out(row) for row in rows])


@router.post("/default-field-orders/{entity_type}", response_model=MessageResponse)
def save_all_field_orders(
    entity_type: str,
    payload: FieldOrdersRequest,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(require_roles(*WRITE_ROLES)),
):
    try:
        school_id = resolve_school_id(db, current_user, payload.campus_id)
        save_field_orders(db, school_id=school_id, entity_type=entity_type, overrides=payload.fields)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return MessageResponse(message="Field orders saved successfully")


@router.post("/default-field-orders/{entity_type}/{category_id}", response_model=MessageResponse)
def save_category_field_orders(
    entity_type: str,
    category_id: str,
    payload: CategoryFieldOrdersRequest,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(require_roles(*WRITE_ROLES)),
):
    overrides = [
        FieldOrderOverride(category_id=category_id, field_label=item.field_label, sort_order=item.sort_order)
        for item in payload.fields
    ]
    try:
        school_id = resolve_school_id(db, current_user, payload.campus_id)
        save_field_orders(db, school_id=school_id, entity_type=entity_type, overrides=overrides)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return MessageResponse(message="Field orders saved successfully")


@router.delete("/default-field-orders/{entity_type}/{category_id}", response_model=MessageResponse)
def reset_category_field_orders(
    entity_type: str,
    category_id: str,
    campus_id: str | None = None,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(require_roles(*WRITE_ROLES)),
):
    try:
        school_id = resolve_school_id(db, current_user, campus_id)
        delete_field_orders(db, school_id=school_id, entity_type=entity_type, category_id=category_id)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return MessageResponse(message="Field orders reset to defaults")


@router.delete("/default-field-orders/{entity_type}", response_model=MessageResponse)
def reset_field_orders(
    entity_type: str,
    campus_id: str | None = None,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(require_roles(*WRITE_ROLES)),
):
    try:
        school_id = resolve_school_id(db, current_user, campus_id)
        reset_all_field_orders(db, school_id=school_id, entity_type=entity_type)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return MessageResponse(message="All field orders reset to defaults")


@router.get("/custom-fields/{entity_type}", response_model=CustomFieldListResponse)
def list_custom_fields(
    entity_type: str,
    campus_id: str | None = None,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        school_id = resolve_school_id(db, current_user, campus_id)
        rows = get_field_definitions(db, school_id=school_id, entity_type=entity_type)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return CustomFieldListResponse(data=[_custom_field_out(row) for row in rows])


@router.get("/custom-fields/{entity_type}/by-category", response_model=CustomFieldGroupResponse)
def list_custom_fields_by_category(
    entity_type: str,
    campus_id: str | None = None,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        school_id = resolve_school_id(db, current_user, campus_id)
        grouped = get_fields_by_category(db, school_id=school_id, entity_type=entity_type)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return CustomFieldGroupResponse(
        data={category: [_custom_field_out(row) for row in rows] for category, rows in grouped.items()}
    )


@router.post("/custom-fields", response_model=CustomFieldResponse, status_code=status.HTTP_201_CREATED)
def add_custom_field(
    payload: CustomFieldCreateRequest,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(require_roles(*WRITE_ROLES)),
):
    try:
        school_id = resolve_school_id(db, current_user, payload.campus_id)
        definition = create_field_definition(db, school_id=school_id, payload=payload)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return CustomFieldResponse(data=_custom_field_out(definition))


@router.post("/custom-fields/reorder", response_model=MessageResponse)
def reorder_custom_fields(
    payload: CustomFieldReorderRequest,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(require_roles(*WRITE_ROLES)),
):
    try:
        school_id = resolve_school_id(db, current_user, payload.campus_id)
        reorder_fields(db, school_id=school_id, category_id=payload.category_id, ordered_ids=payload.ordered_ids)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return MessageResponse(message="Fields reordered successfully")


@router.patch("/custom-fields/{field_id}", response_model=CustomFieldResponse)
def edit_custom_field(
    field_id: str,
    payload: CustomFieldUpdateRequest,
    campus_id: str | None = None,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(require_roles(*WRITE_ROLES)),
):
    try:
        school_id = resolve_school_id(db, current_user, campus_id)
        definition = update_field_definition(db, field_id=field_id, school_id=school_id, payload=payload)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return CustomFieldResponse(data=_custom_field_out(definition))


@router.delete("/custom-fields/{field_id}", response_model=MessageResponse)
def remove_custom_field(
    field_id: str,
    campus_id: str | None = None,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(require_roles(*WRITE_ROLES)),
):
    try:
        school_id = resolve_school_id(db, current_user, campus_id)
        delete_field_definition(db, field_id=field_id, school_id=school_id)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return MessageResponse(message="Custom field deleted")


@router.get("/fields/{entity_type}/catalog", response_model=MergedFieldListResponse)
def standard_field_catalog(entity_type: str, _: CurrentUser = Depends(get_current_user)):
    try:
        fields = get_standard_fields(parse_entity_type(entity_type))
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return MergedFieldListResponse(data=[MergedFieldOut.from_field(normalize_field(item)) for item in fields])


@router.get("/fields/{entity_type}/merged", response_model=MergedFieldListResponse)
def merged_fields(
    entity_type: str,
    categories: list[str] | None = Query(default=None),
    campus_id: str | None = None,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        school_id = resolve_school_id(db, current_user, campus_id)
        fields = get_merged_fields(db, school_id=school_id, entity_type=entity_type, categories=categories)
    except FieldOrderError as exc:
        raise _http_error(exc) from exc
    return MergedFieldListResponse(data=[MergedFieldOut.from_field(item) for item in fields])
