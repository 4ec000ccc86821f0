"""Pydantic schemas for Users and authentication."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field, field_validator

from event_manager.schemas.common import APIModel

MIN_PASSWORD_LENGTH = 8


def _lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value is not None else value


class UserRegister(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _lower(v)


class UserLogin(APIModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _lower(v)


class ForgotPasswordRequest(APIModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _lower(v)


class ResetPasswordRequest(APIModel):
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class ProfileUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    old_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=MIN_PASSWORD_LENGTH)

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return _lower(v)


class UserSummary(APIModel):
    user_id: str
    name: str
    email: str


class UserOut(APIModel):
    user_id: str
    name: str
    email: str
    role: str
    email_verified: bool
    created_at: Optional[datetime] = None


class LoginOut(APIModel):
    user_id: str
    name: str
    email: str
    role: str
    token: str


class TokenCheckOut(APIModel):
    valid: bool
    user: UserOut
