from __future__ import annotations
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel

from core.config_loader import settings

bearer_scheme = HTTPBearer(auto_error=False)

# subjects are recorded as employees.created_by
MAX_SUBJECT_LENGTH = 64


class CurrentUser(BaseModel):
    id: str
    is_active: bool = True


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise _credentials_exception("Token is expired") from e
    except JWTError as e:
        raise _credentials_exception() from e


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _credentials_exception("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    subject = payload.get("sub")
    if not subject or len(str(subject)) > MAX_SUBJECT_LENGTH:
        raise _credentials_exception()
    return CurrentUser(id=str(subject), is_active=payload.get("active", True) is not False)


def get_current_active_user(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user
