# File: expense_tracker/api/v1/routes_auth.py

"""
Auth API routes: registration, login and the current user's profile.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from expense_tracker.api.deps import get_current_user, get_db
from expense_tracker.core.errors import AuthFailure
from expense_tracker.models.user import User
from expense_tracker.schemas.user import LoginRequest, RegisterUserRequest, Token, UserRead
from expense_tracker.services import auth_service

router = APIRouter()


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def register(payload: RegisterUserRequest, db: Session = Depends(get_db)):
    return auth_service.register_user(
        db,
        email=payload.email,
        password=payload.password,
        confirm_password=payload.confirm_password,
    )


@router.post("/login", response_model=Token, summary="Exchange credentials for a bearer token")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate_user(db, email=payload.email, password=payload.password)
    if user is None:
        raise AuthFailure("Incorrect email or password")
    return auth_service.issue_token(user)


@router.get("/me", response_model=UserRead, summary="Current user")
def read_me(current_user: User = Depends(get_current_user)):
    return current_user
