import logging
import time

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import DuplicateField, FieldNotFound, NotAuthorized, StorageFailure
from .merge import DEFAULT_CUSTOM_SORT_ORDER, CustomField
from .models import CampusScope, CustomFieldDefinition, EntityType, School
from .schemas import CustomFieldCreateRequest, CustomFieldUpdateRequest
from .store import parse_entity_type

logger = logging.getLogger(__name__)


def _is_visible(definition: CustomFieldDefinition, school_id: str, parent_school_id: str | None) -> bool:
    if definition.school_id == school_id:
        return True
    if (
        parent_school_id
        and definition.school_id == parent_school_id
        and definition.campus_scope == CampusScope.ALL_CAMPUSES
    ):
        return True
    return (
        definition.campus_scope == CampusScope.SELECTED_CAMPUSES
        and school_id in (definition.applicable_school_ids or [])
    )


def get_field_definitions(
    db: Session,
    *,
    school_id: str,
    entity_type: str | EntityType,
) -> list[CustomFieldDefinition]:
    """Active definitions a school sees: its own, its parent's ``all_campuses``
    fields, and any ``selected_campuses`` field that lists it."""
    entity_type = parse_entity_type(entity_type)
    try:
        school = db.get(School, school_id)
        parent_school_id = school.parent_school_id if school else None
        rows = (
            db.query(CustomFieldDefinition)
            .filter(
                CustomFieldDefinition.entity_type == entity_type,
                CustomFieldDefinition.is_active.is_(True),
            )
            .order_by(CustomFieldDefinition.sort_order)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error(f"Failed to load custom fields for {school_id}/{entity_type.value}: {exc}")
        raise StorageFailure("Failed to fetch custom field definitions") from exc

    visible = [row for row in rows if _is_visible(row, school_id, parent_school_id)]
    logger.info(f"Custom fields query result: {len(visible)} fields found for {entity_type.value}")
    return visible


def get_fields_by_category(
    db: Session,
    *,
    school_id: str,
    entity_type: str | EntityType,
) -> dict[str, list[CustomFieldDefinition]]:
    grouped: dict[str, list[CustomFieldDefinition]] = {}
    for row in get_field_definitions(db, school_id=school_id, entity_type=entity_type):
        grouped.setdefault(row.category_id, []).append(row)
    for rows in grouped.values():
        rows.sort(key=lambda row: row.sort_order if row.sort_order is not None else DEFAULT_CUSTOM_SORT_ORDER)
    return grouped


def create_field_definition(
    db: Session,
    *,
    school_id: str,
    payload: CustomFieldCreateRequest,
) -> CustomFieldDefinition:
    field_key = payload.field_key or f"{payload.category_id}_{int(time.time() * 1000)}"
    definition = CustomFieldDefinition(
        school_id=school_id,
        entity_type=payload.entity_type,
        category_id=payload.category_id,
        category_name=payload.category_name,
        field_key=field_key,
        label=payload.label.strip(),
        type=payload.type,
        options=list(payload.options),
        required=payload.required,
        sort_order=payload.sort_order if payload.sort_order is not None else 0,
        category_order=payload.category_order,
        campus_scope=payload.campus_scope,
        applicable_school_ids=list(payload.applicable_school_ids),
    )
    db.add(definition)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateField("A field with this key already exists") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Error creating custom field {field_key} for {school_id}: {exc}")
        raise StorageFailure("Failed to create custom field definition") from exc

    db.refresh(definition)
    logger.info(f"Created custom field {field_key} ({definition.id}) for {school_id}")
    return definition


def _owned_definition(db: Session, field_id: str, school_id: str, action: str) -> CustomFieldDefinition:
    try:
        definition = db.get(CustomFieldDefinition, field_id)
    except SQLAlchemyError as exc:
        raise StorageFailure("Failed to fetch custom field definition") from exc
    if not definition:
        raise FieldNotFound("Field definition not found")
    if definition.school_id != school_id:
        raise NotAuthorized(f"You can only {action} fields defined by your school")
    return definition


def update_field_definition(
    db: Session,
    *,
    field_id: str,
    school_id: str,
    payload: CustomFieldUpdateRequest,
) -> CustomFieldDefinition:
    definition = _owned_definition(db, field_id, school_id, "update")
    for name, value in payload.model_dump(exclude_unset=True).items():
        # sort_order is the only nullable column a client may clear.
        if value is None and name != "sort_order":
            continue
        setattr(definition, name, value)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateField("A field with this key already exists") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Error updating custom field {field_id}: {exc}")
        raise StorageFailure("Failed to update custom field definition") from exc

    db.refresh(definition)
    return definition


def delete_field_definition(db: Session, *, field_id: str, school_id: str) -> None:
    definition = _owned_definition(db, field_id, school_id, "delete")
    definition.is_active = False
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Error deleting custom field {field_id}: {exc}")
        raise StorageFailure("Failed to delete custom field definition") from exc
    logger.info(f"Deactivated custom field {field_id} for {school_id}")


def reorder_fields(db: Session, *, school_id: str, category_id: str, ordered_ids: list[str]) -> None:
    try:
        for index, field_id in enumerate(ordered_ids):
            db.query(CustomFieldDefinition).filter(
                CustomFieldDefinition.id == field_id,
                CustomFieldDefinition.school_id == school_id,
                CustomFieldDefinition.category_id == category_id,
            ).update({CustomFieldDefinition.sort_order: index}, synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Error reordering fields in {category_id} for {school_id}: {exc}")
        raise StorageFailure("Failed to reorder some fields") from exc


def to_custom_field(definition: CustomFieldDefinition) -> CustomField:
    return CustomField(
        field_key=definition.field_key,
        label=definition.label,
        type=definition.type,
        category_id=definition.category_id,
        sort_order=definition.sort_order,
        required=definition.required,
        options=tuple(definition.options or ()),
    )
