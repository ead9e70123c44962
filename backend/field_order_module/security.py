from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from .config import settings
from .models import UserRole


class AuthError(Exception):
    pass


@dataclass(frozen=True)
class CurrentUser:
    subject: str
    role: UserRole
    school_id: str | None


def create_access_token(
    subject: str,
    role: str,
    school_id: str | None = None,
    expires_minutes: int | None = None,
) -> str:
    exp_minutes = expires_minutes or settings.jwt_exp_minutes
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": subject,
        "role": role,
        "school_id": school_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=exp_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        if "sub" not in payload or "role" not in payload:
            raise AuthError("Invalid token payload")
        return payload
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid token") from exc


def user_from_payload(payload: dict[str, Any]) -> CurrentUser:
    try:
        role = UserRole(payload["role"])
    except ValueError as exc:
        raise AuthError("Unknown role") from exc
    school_id = payload.get("school_id")
    return CurrentUser(subject=payload["sub"], role=role, school_id=str(school_id) if school_id else None)
