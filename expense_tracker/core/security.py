# File: expense_tracker/core/security.py

"""
Security helpers for the Expense Tracker API.

Password hashing goes through passlib (bcrypt). Access tokens are JWTs
signed with python-jose; every protected request presents one as
``Authorization: Bearer <token>``.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from expense_tracker.core.config import settings
from expense_tracker.core.errors import AuthFailure


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class TokenClaims:
    """Identity extracted from a validated access token."""

    user_id: int
    email: Optional[str]
    issued_at: datetime
    expires_at: datetime


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: int | str,
    *,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign an access token for ``subject`` (the user id).

    Claims: ``sub``, ``email``, ``iat`` and ``exp``. A negative
    ``expires_delta`` produces an already expired token.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    issued_at = int(datetime.now(timezone.utc).timestamp())
    to_encode: dict[str, Any] = {
        "sub": str(subject),
        "iat": issued_at,
        "exp": issued_at + int(expires_delta.total_seconds()),
    }
    if email is not None:
        to_encode["email"] = email
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """
    Validate a token and return its claims.

    Raises AuthFailure when the signature does not match, the token has
    expired, or the claims are malformed.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError as exc:
        raise AuthFailure("Token has expired") from exc
    except JWTError as exc:
        raise AuthFailure("Invalid token") from exc

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise AuthFailure("Invalid token subject") from exc

    try:
        issued_at = datetime.fromtimestamp(int(payload.get("iat", 0)), tz=timezone.utc)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthFailure("Invalid token claims") from exc

    return TokenClaims(
        user_id=user_id,
        email=payload.get("email"),
        issued_at=issued_at,
        expires_at=expires_at,
    )
