# File: expense_tracker/services/auth_service.py

"""
Authentication service.

Contains:
  - User lookup
  - Registration (duplicate e-mail and password confirmation checks)
  - Password verification
  - Token issuance
"""

from datetime import timedelta
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from expense_tracker.core.config import settings
from expense_tracker.core.errors import ConflictFailure, ValidationFailure
from expense_tracker.core.security import create_access_token, hash_password, verify_password
from expense_tracker.models.expense import Expense  # noqa: F401  # registers the relationship target
from expense_tracker.models.user import User
from expense_tracker.schemas.user import Token

logger = structlog.get_logger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    stmt = select(User).where(User.email == _normalize_email(email))
    return db.scalars(stmt).first()


def register_user(
    db: Session,
    *,
    email: str,
    password: str,
    confirm_password: str,
) -> User:
    if password != confirm_password:
        raise ValidationFailure("Passwords do not match")

    email = _normalize_email(email)
    if get_user_by_email(db, email) is not None:
        raise ConflictFailure("Email already registered")

    user = User(email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictFailure("Email already registered") from exc
    db.refresh(user)

    logger.info("user_registered", user_id=user.user_id)
    return user


def authenticate_user(
    db: Session,
    *,
    email: str,
    password: str,
) -> Optional[User]:
    """
    Return the user when the credentials match, None otherwise.
    """
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", reason="bad_credentials")
        return None
    logger.info("login_succeeded", user_id=user.user_id)
    return user


def issue_token(user: User) -> Token:
    lifetime = timedelta(minutes=settings.access_token_expire_minutes)
    access_token = create_access_token(user.user_id, email=user.email, expires_delta=lifetime)
    return Token(access_token=access_token, expires_in=int(lifetime.total_seconds()))
