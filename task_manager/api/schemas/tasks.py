from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from task_manager.api.schemas.common import Position, RowId


class TaskCreateRequest(BaseModel):
    title: str
    status: str = Field(description="Task status slug, e.g. 'draft'.")
    index: Optional[Position] = None
    content: Optional[str] = None
    assignee_id: Optional[RowId] = Field(
        default=None,
        validation_alias=AliasChoices("assignee_id", "assigneeId"),
    )
    taskLabelIds: Optional[List[RowId]] = Field(
        default=None,
        validation_alias=AliasChoices("taskLabelIds", "labelIds"),
    )

    @field_validator("title", "status")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class TaskUpdateRequest(BaseModel):
    """
    Partial update. A key present in the body is applied, including an
    explicit null for assignee_id (unassign); absent keys are kept.
    """

    title: Optional[str] = None
    status: Optional[str] = None
    index: Optional[Position] = None
    content: Optional[str] = None
    assignee_id: Optional[RowId] = Field(
        default=None,
        validation_alias=AliasChoices("assignee_id", "assigneeId"),
    )
    taskLabelIds: Optional[List[RowId]] = Field(
        default=None,
        validation_alias=AliasChoices("taskLabelIds", "labelIds"),
    )

    # validators only run for keys present in the body
    @field_validator("title", "status")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("must not be blank")
        return v


class TaskResponse(BaseModel):
    id: int
    index: Optional[Position] = None
    title: str
    content: str
    status: str
    assignee_id: Optional[int] = None
    author_id: int
    taskLabelIds: List[int]
    createdAt: str
