from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class TaskStatusCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)

    @field_validator("name", "slug")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class TaskStatusUpdateRequest(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None

    @field_validator("name", "slug")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class TaskStatusResponse(BaseModel):
    id: int
    name: str
    slug: str
    createdAt: str
