from __future__ import annotations

from pydantic import BaseModel, Field


class LabelCreateRequest(BaseModel):
    name: str = Field(min_length=3, max_length=1000)


class LabelUpdateRequest(BaseModel):
    name: str = Field(min_length=3, max_length=1000)


class LabelResponse(BaseModel):
    id: int
    name: str
    createdAt: str
