import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pune_events.core.security import hash_password, verify_password
from pune_events.models.users import Role, User, UserRole

logger = logging.getLogger(__name__)


class EmailAlreadyRegisteredError(Exception):
    pass


class RoleNotFoundError(Exception):
    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalar(select(User).where(User.email == normalize_email(email)))


def sign_up(db: Session, *, email: str, password: str, role: Role = Role.ATTENDEE) -> User:
    """Create a user together with its role row."""
    if get_user_by_email(db, email) is not None:
        raise EmailAlreadyRegisteredError("Email already registered")

    user = User(email=normalize_email(email), password_hash=hash_password(password))
    db.add(user)
    try:
        db.flush()
        db.add(UserRole(user_id=user.id, role=role.value))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise EmailAlreadyRegisteredError("Email already registered")
    db.refresh(user)
    logger.info("User %s signed up as %s", user.id, role.value)
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def get_user_role(db: Session, user_id: int) -> Role:
    role = db.scalar(select(UserRole.role).where(UserRole.user_id == user_id))
    if role is None:
        raise RoleNotFoundError("Failed to load user role")
    return Role(role)
