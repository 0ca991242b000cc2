"""User Schemas — Pydantic models for admin user management and login.

Invariants:
    - UserUpdate is partial: only fields present in the request body are applied
    - Emails are stripped and lowercased before comparison or storage
    - UserResponse never carries the password hash
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.domain_types import AccountStatus, Role

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _normalize_email(v: str | None) -> str | None:
    return v.strip().lower() if isinstance(v, str) else v


class UserUpdate(BaseModel):
    """Admin partial update — unset fields are left untouched."""
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    role: Role | None = None
    account_status: AccountStatus | None = None
    bio: str | None = Field(None, max_length=2000)
    country: str | None = Field(None, max_length=100)
    city: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=30)
    is_verified: bool | None = None
    is_private: bool | None = None
    password: str | None = Field(None, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str | None
    last_name: str | None
    email: str
    role: str
    account_status: str
    bio: str | None = None
    country: str | None = None
    city: str | None = None
    phone: str | None = None
    is_verified: bool
    is_private: bool
    created_at: datetime
    modified_at: datetime | None = None


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)
