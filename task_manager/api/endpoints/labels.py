from __future__ import annotations

from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Depends, Response, status

from task_manager.api.deps import label_service
from task_manager.api.schemas.common import id_path
from task_manager.api.schemas.labels import LabelCreateRequest, LabelResponse, LabelUpdateRequest
from task_manager.core.services.labels import LabelService

LabelId = Annotated[int, id_path("Label id")]

router = APIRouter(prefix="/labels", tags=["labels"])


@router.get("", response_model=List[LabelResponse])
def index(response: Response, svc: LabelService = Depends(label_service)) -> List[Dict[str, Any]]:
    labels = [label.to_dict() for label in svc.get_all()]
    response.headers["X-Total-Count"] = str(len(labels))
    return labels


@router.get("/{label_id}", response_model=LabelResponse)
def show(label_id: LabelId, svc: LabelService = Depends(label_service)) -> Dict[str, Any]:
    return svc.find_by_id(label_id).to_dict()


@router.post("", response_model=LabelResponse, status_code=status.HTTP_201_CREATED)
def create(body: LabelCreateRequest, svc: LabelService = Depends(label_service)) -> Dict[str, Any]:
    return svc.create(name=body.name).to_dict()


@router.put("/{label_id}", response_model=LabelResponse)
def update(label_id: LabelId, body: LabelUpdateRequest, svc: LabelService = Depends(label_service)) -> Dict[str, Any]:
    return svc.update(label_id, name=body.name).to_dict()


@router.delete(
    "/{label_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={405: {"description": "Label is attached to a task"}},
)
def destroy(label_id: LabelId, svc: LabelService = Depends(label_service)) -> Response:
    svc.delete(label_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
