from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from task_manager.api.deps import current_principal, task_service
from task_manager.api.schemas.common import id_path, id_query
from task_manager.api.schemas.tasks import TaskCreateRequest, TaskResponse, TaskUpdateRequest
from task_manager.core.auth.models import Principal
from task_manager.core.models import TaskFilter
from task_manager.core.services.tasks import TaskService

TaskId = Annotated[int, id_path("Task id")]

router = APIRouter(prefix="/tasks", tags=["tasks"])

# request field -> service key
_FIELD_MAP = {
    "title": "title",
    "status": "status",
    "index": "index",
    "content": "content",
    "assignee_id": "assignee_id",
    "taskLabelIds": "label_ids",
}


@router.get("", response_model=List[TaskResponse], summary="Get list of all tasks")
def index(
    response: Response,
    title_cont: Optional[str] = Query(default=None, alias="titleCont", description="Case-insensitive title substring"),
    assignee_id: Optional[int] = id_query("assigneeId", "Assignee user id"),
    status_slug: Optional[str] = Query(default=None, alias="status", description="Task status slug"),
    label_id: Optional[int] = id_query("labelId", "Label id"),
    svc: TaskService = Depends(task_service),
) -> List[Dict[str, Any]]:
    flt = TaskFilter(title_cont=title_cont, assignee_id=assignee_id, status=status_slug, label_id=label_id)
    tasks = [t.to_dict() for t in svc.get_all(flt)]
    response.headers["X-Total-Count"] = str(len(tasks))
    return tasks


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get a task by its id",
    responses={404: {"description": "Task with that id not found"}},
)
def show(task_id: TaskId, svc: TaskService = Depends(task_service)) -> Dict[str, Any]:
    return svc.find_by_id(task_id).to_dict()


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new task",
    responses={400: {"description": "Invalid task data supplied"}},
)
def create(
    body: TaskCreateRequest,
    principal: Principal = Depends(current_principal),
    svc: TaskService = Depends(task_service),
) -> Dict[str, Any]:
    task = svc.create(
        author_email=principal.subject,
        title=body.title,
        status=body.status,
        content=body.content,
        index=body.index,
        assignee_id=body.assignee_id,
        label_ids=body.taskLabelIds,
    )
    return task.to_dict()


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Update task by its id",
    responses={400: {"description": "Invalid task data supplied"}, 404: {"description": "Task not found"}},
)
def update(task_id: TaskId, body: TaskUpdateRequest, svc: TaskService = Depends(task_service)) -> Dict[str, Any]:
    changes = {_FIELD_MAP[k]: v for k, v in body.model_dump(exclude_unset=True).items()}
    return svc.update(task_id, changes).to_dict()


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete task by its id")
def destroy(task_id: TaskId, svc: TaskService = Depends(task_service)) -> Response:
    svc.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
