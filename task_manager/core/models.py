from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class User:
    id: int
    email: str
    password_digest: str
    created_at: str
    updated_at: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        # password_digest never leaves the service
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class TaskStatus:
    id: int
    name: str
    slug: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "slug": self.slug, "createdAt": self.created_at}


@dataclass
class Label:
    id: int
    name: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "createdAt": self.created_at}


@dataclass
class Task:
    id: int
    title: str
    content: str
    status: str
    author_id: int
    created_at: str
    index: Optional[int] = None
    assignee_id: Optional[int] = None
    label_ids: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "index": self.index,
            "title": self.title,
            "content": self.content,
            "status": self.status,
            "assignee_id": self.assignee_id,
            "author_id": self.author_id,
            "taskLabelIds": list(self.label_ids),
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class TaskFilter:
    """Optional criteria for listing tasks; unset fields do not constrain."""

    title_cont: Optional[str] = None
    assignee_id: Optional[int] = None
    status: Optional[str] = None
    label_id: Optional[int] = None
