from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from pune_events.core.session import SessionManager, get_session_manager
from pune_events.database.db import get_db
from pune_events.dependencies import bearer_scheme, get_bearer_token
from pune_events.schemas.users import SessionOut, SignInRequest, SignUpRequest, UserOut
from pune_events.services.accounts import EmailAlreadyRegisteredError, authenticate, sign_up

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def signup(payload: SignUpRequest, db: Session = Depends(get_db)):
    try:
        user = sign_up(db, email=payload.email, password=payload.password, role=payload.role)
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"id": user.id, "email": user.email, "role": payload.role}


@router.post("/signin", response_model=SessionOut)
def signin(
    payload: SignInRequest,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
):
    user = authenticate(db, payload.email, payload.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return sessions.sign_in(user.id)


@router.get("/session", response_model=Optional[SessionOut])
def current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    sessions: SessionManager = Depends(get_session_manager),
):
    if credentials is None:
        return None
    return sessions.get_session(credentials.credentials)


@router.post("/refresh", response_model=SessionOut)
def refresh_session(
    token: str = Depends(get_bearer_token),
    sessions: SessionManager = Depends(get_session_manager),
):
    session = sessions.refresh(token)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or invalid",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
def signout(
    token: str = Depends(get_bearer_token),
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.sign_out(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
