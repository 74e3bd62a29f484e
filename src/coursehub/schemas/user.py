"""Pydantic schemas for accounts and sessions."""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from coursehub.db.models import Role


def normalize_email(value: str) -> str:
    """Emails are compared case-insensitively; store and look them up lower-cased."""
    return value.strip().lower()


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: Role

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Name is required.")
        return normalized

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return normalize_email(value)


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    """Returned by register and login: the account plus a session token."""
    id: uuid.UUID
    name: str
    email: str
    role: Role
    token: str


class UserRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    role: Role
    created_at: datetime

    model_config = {"from_attributes": True}


class UserPublic(BaseModel):
    """Public projection of a user — what other people may see."""
    id: uuid.UUID
    name: str
    email: str

    model_config = {"from_attributes": True}
