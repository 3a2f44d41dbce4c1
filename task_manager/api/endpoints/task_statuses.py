from __future__ import annotations

from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Depends, Response, status

from task_manager.api.deps import task_status_service
from task_manager.api.schemas.common import id_path
from task_manager.api.schemas.task_statuses import (
    TaskStatusCreateRequest,
    TaskStatusResponse,
    TaskStatusUpdateRequest,
)
from task_manager.core.services.task_statuses import TaskStatusService

TaskStatusId = Annotated[int, id_path("Task status id")]

router = APIRouter(prefix="/task_statuses", tags=["task statuses"])


@router.get("", response_model=List[TaskStatusResponse])
def index(response: Response, svc: TaskStatusService = Depends(task_status_service)) -> List[Dict[str, Any]]:
    statuses = [s.to_dict() for s in svc.get_all()]
    response.headers["X-Total-Count"] = str(len(statuses))
    return statuses


@router.get("/{status_id}", response_model=TaskStatusResponse)
def show(status_id: TaskStatusId, svc: TaskStatusService = Depends(task_status_service)) -> Dict[str, Any]:
    return svc.find_by_id(status_id).to_dict()


@router.post("", response_model=TaskStatusResponse, status_code=status.HTTP_201_CREATED)
def create(body: TaskStatusCreateRequest, svc: TaskStatusService = Depends(task_status_service)) -> Dict[str, Any]:
    return svc.create(name=body.name, slug=body.slug).to_dict()


@router.put("/{status_id}", response_model=TaskStatusResponse)
def update(
    status_id: TaskStatusId,
    body: TaskStatusUpdateRequest,
    svc: TaskStatusService = Depends(task_status_service),
) -> Dict[str, Any]:
    return svc.update(status_id, body.model_dump(exclude_unset=True)).to_dict()


@router.delete(
    "/{status_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={405: {"description": "Status is used by a task"}},
)
def destroy(status_id: TaskStatusId, svc: TaskStatusService = Depends(task_status_service)) -> Response:
    svc.delete(status_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
