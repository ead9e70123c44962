from collections.abc import Callable

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import NotAuthorized, StorageFailure
from .models import School, UserRole
from .security import AuthError, CurrentUser, decode_access_token, user_from_payload


WRITE_ROLES = (UserRole.SCHOOL_ADMIN, UserRole.SUPER_ADMIN)


def _parse_token(auth_header: str | None) -> str:
    if not auth_header:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization header")
    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme")
    return parts[1].strip()


def get_current_user(authorization: str | None = Header(default=None, alias="Authorization")) -> CurrentUser:
    token = _parse_token(authorization)
    try:
        return user_from_payload(decode_access_token(token))
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc


def require_roles(*allowed_roles: UserRole) -> Callable:
    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role privileges")
        return current_user

    return dependency


def resolve_school_id(db: Session, user: CurrentUser, campus_id: str | None = None) -> str:
    """Pick the school a request acts on: ``campus_id`` when given, else the caller's own."""
    campus_id = (campus_id or "").strip() or None
    if user.role == UserRole.SUPER_ADMIN and campus_id:
        return campus_id
    if not user.school_id:
        raise NotAuthorized("School ID not found in profile")
    if not campus_id or campus_id == user.school_id:
        return user.school_id

    try:
        campus = db.get(School, campus_id)
    except SQLAlchemyError as exc:
        raise StorageFailure("Failed to resolve campus") from exc
    if not campus or campus.parent_school_id != user.school_id:
        raise NotAuthorized("Campus does not belong to your school")
    return campus.id
