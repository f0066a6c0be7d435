# File: expense_tracker/api/deps.py

from typing import Optional

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from expense_tracker.core.errors import AuthFailure
from expense_tracker.core.security import decode_access_token
from expense_tracker.db.session import get_db
from expense_tracker.models.user import User
from expense_tracker.services.auth_service import get_user

logger = structlog.get_logger(__name__)

# auto_error=False so a missing header reaches our own AuthFailure (401, not 403).
bearer_scheme = HTTPBearer(auto_error=False)

__all__ = ["get_db", "get_current_user"]


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    FastAPI dependency resolving the authenticated user from the bearer token.

    Usage in route functions:
        current_user: User = Depends(get_current_user)
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthFailure("Not authenticated")

    claims = decode_access_token(credentials.credentials)

    user = get_user(db, claims.user_id)
    if user is None:
        logger.warning("token_for_unknown_user", user_id=claims.user_id)
        raise AuthFailure("User no longer exists")

    return user
