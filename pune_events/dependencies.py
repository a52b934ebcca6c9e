from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pune_events.core.session import SessionManager, get_session_manager
from pune_events.database.db import get_db
from pune_events.models.users import Role
from pune_events.services.accounts import RoleNotFoundError, get_user_role

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        raise _unauthorized()
    return credentials.credentials


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    sessions: SessionManager = Depends(get_session_manager),
) -> Optional[int]:
    """Current user for pages that also work signed out."""
    if credentials is None:
        return None
    session = sessions.get_session(credentials.credentials)
    return session.user_id if session else None


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    sessions: SessionManager = Depends(get_session_manager),
) -> int:
    if credentials is None:
        raise _unauthorized()
    session = sessions.get_session(credentials.credentials)
    if session is None:
        raise _unauthorized("Session expired or invalid")
    return session.user_id


def require_manager(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> int:
    try:
        role = get_user_role(db, user_id)
    except RoleNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if role is not Role.EVENT_MANAGER:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Event manager role required")
    return user_id
