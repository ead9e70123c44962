import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StorageFailure, ValidationFailure
from .models import DefaultFieldOrder, EntityType
from .schemas import FieldOrderOverride

logger = logging.getLogger(__name__)


def parse_entity_type(value: str | EntityType) -> EntityType:
    try:
        return EntityType(value)
    except ValueError as exc:
        raise ValidationFailure("Invalid entity type. Must be student, parent, or teacher") from exc


def _scope_query(db: Session, school_id: str, entity_type: EntityType):
    return db.query(DefaultFieldOrder).filter(
        DefaultFieldOrder.school_id == school_id,
        DefaultFieldOrder.entity_type == entity_type,
    )


def get_field_orders(
    db: Session,
    *,
    school_id: str,
    entity_type: str | EntityType,
    category_id: str | None = None,
) -> list[DefaultFieldOrder]:
    entity_type = parse_entity_type(entity_type)
    try:
        query = _scope_query(db, school_id, entity_type)
        if category_id:
            query = query.filter(DefaultFieldOrder.category_id == category_id)
        return query.order_by(DefaultFieldOrder.category_id, DefaultFieldOrder.sort_order).all()
    except SQLAlchemyError as exc:
        logger.error(f"Failed to load field orders for {school_id}/{entity_type.value}: {exc}")
        raise StorageFailure("Failed to retrieve field orders") from exc


def _upsert_row(db: Session, school_id: str, entity_type: EntityType, override: FieldOrderOverride) -> None:
    key = (
        DefaultFieldOrder.school_id == school_id,
        DefaultFieldOrder.entity_type == entity_type,
        DefaultFieldOrder.category_id == override.category_id,
        DefaultFieldOrder.field_label == override.field_label,
    )
    row = db.query(DefaultFieldOrder).filter(*key).first()
    if row:
        row.sort_order = override.sort_order
        db.commit()
        return

    db.add(
        DefaultFieldOrder(
            school_id=school_id,
            entity_type=entity_type,
            category_id=override.category_id,
            field_label=override.field_label,
            sort_order=override.sort_order,
        )
    )
    try:
        db.commit()
    except IntegrityError:
        # A concurrent save inserted the same key first; overwrite it.
        db.rollback()
        row = db.query(DefaultFieldOrder).filter(*key).one()
        row.sort_order = override.sort_order
        db.commit()


def save_field_orders(
    db: Session,
    *,
    school_id: str,
    entity_type: str | EntityType,
    overrides: Iterable[FieldOrderOverride],
) -> int:
    entity_type = parse_entity_type(entity_type)
    overrides = list(overrides)
    if not overrides:
        raise ValidationFailure("Fields array is required and must not be empty")

    saved = 0
    for override in overrides:
        try:
            _upsert_row(db, school_id, entity_type, override)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                f"Failed to save field order {override.category_id}/{override.field_label} for {school_id}: {exc}"
            )
            raise StorageFailure("Failed to save field orders") from exc
        saved += 1

    logger.info(f"Saved {saved} field order(s) for {school_id}/{entity_type.value}")
    return saved


def delete_field_orders(
    db: Session,
    *,
    school_id: str,
    entity_type: str | EntityType,
    category_id: str,
) -> int:
    entity_type = parse_entity_type(entity_type)
    try:
        deleted = (
            _scope_query(db, school_id, entity_type)
            .filter(DefaultFieldOrder.category_id == category_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Failed to delete field orders for {school_id}/{entity_type.value}/{category_id}: {exc}")
        raise StorageFailure("Failed to delete field orders") from exc

    logger.info(f"Reset {deleted} field order(s) for {school_id}/{entity_type.value}/{category_id}")
    return deleted


def reset_all_field_orders(db: Session, *, school_id: str, entity_type: str | EntityType) -> int:
    entity_type = parse_entity_type(entity_type)
    try:
        deleted = _scope_query(db, school_id, entity_type).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Failed to reset field orders for {school_id}/{entity_type.value}: {exc}")
        raise StorageFailure("Failed to reset field orders") from exc

    logger.info(f"Reset all {deleted} field order(s) for {school_id}/{entity_type.value}")
    return deleted
