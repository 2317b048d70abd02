from typing import Optional

from fastapi import Depends, Header, Request
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from tasknest.config import Settings
from tasknest.database import get_db
from tasknest.models.user import User
from tasknest.services.identity import get_identity
from tasknest.utils.auth import decode_token
from tasknest.utils.errors import ApiError


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _extract_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an `Authorization: Bearer ...` header."""
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    return None


def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """Resolve the bearer token to a user and attach it to request.state."""
    tok = _extract_token(authorization)
    if not tok:
        raise ApiError.unauthorized()
    try:
        payload = decode_token(tok, settings)
    except ExpiredSignatureError:
        raise ApiError.unauthorized("Token expired")
    except JWTError:
        raise ApiError.unauthorized("Invalid token")

    user_id = payload.get("sub")
    user = get_identity(db, user_id) if user_id else None
    if user is None:
        raise ApiError.unauthorized()

    request.state.user = user
    return user
