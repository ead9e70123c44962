from .database import Base, engine
from .merge import CustomField, MergedField, StandardField, merge_and_sort_fields
from .routes import router


def init_field_order_module() -> None:
    Base.metadata.create_all(bind=engine)


__all__ = [
    "router",
    "init_field_order_module",
    "merge_and_sort_fields",
    "StandardField",
    "CustomField",
    "MergedField",
]
