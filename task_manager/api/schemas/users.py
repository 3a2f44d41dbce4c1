from __future__ import annotations

import re
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def check_email(v: Optional[str]) -> str:
    if v is None:
        raise ValueError("email is required")
    v = v.strip()
    if not _EMAIL_RE.match(v):
        raise ValueError("must be a well-formed email address")
    return v


class UserCreateRequest(BaseModel):
    email: str
    password: str = Field(
        min_length=3,
        validation_alias=AliasChoices("password", "passwordDigest"),
        description="Plain password; stored only as a salted digest.",
    )
    firstName: Optional[str] = None
    lastName: Optional[str] = None

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return check_email(v)


class UserUpdateRequest(BaseModel):
    """Partial update: only fields present in the body are changed."""

    email: Optional[str] = None
    password: Optional[str] = Field(
        default=None,
        min_length=3,
        validation_alias=AliasChoices("password", "passwordDigest"),
    )
    firstName: Optional[str] = None
    lastName: Optional[str] = None

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: Optional[str]) -> str:
        return check_email(v)


class UserResponse(BaseModel):
    id: int
    email: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    createdAt: str
    updatedAt: str
