# File: expense_tracker/schemas/user.py

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from expense_tracker.core.config import settings


class UserBase(BaseModel):
    email: EmailStr


class RegisterUserRequest(UserBase):
    password: str = Field(..., min_length=settings.password_min_length, max_length=128)
    confirm_password: str = Field(..., min_length=settings.password_min_length, max_length=128)


class LoginRequest(UserBase):
    password: str = Field(..., min_length=1, max_length=128)


class UserRead(UserBase):
    user_id: int
    created_at: datetime

    class Config:
        from_attributes = True  # Pydantic v2: replaces orm_mode


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
