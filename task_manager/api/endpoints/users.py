from __future__ import annotations

from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Depends, Response, status

from task_manager.api.deps import user_service
from task_manager.api.schemas.common import id_path
from task_manager.api.schemas.users import UserCreateRequest, UserResponse, UserUpdateRequest
from task_manager.core.services.users import UserService

UserId = Annotated[int, id_path("User id")]

router = APIRouter(prefix="/users", tags=["users"])

# request field -> service key
_FIELD_MAP = {"email": "email", "password": "password", "firstName": "first_name", "lastName": "last_name"}


@router.get("", response_model=List[UserResponse])
def index(response: Response, svc: UserService = Depends(user_service)) -> List[Dict[str, Any]]:
    users = [u.to_dict() for u in svc.get_all()]
    response.headers["X-Total-Count"] = str(len(users))
    return users


@router.get("/{user_id}", response_model=UserResponse, responses={404: {"description": "User not found"}})
def show(user_id: UserId, svc: UserService = Depends(user_service)) -> Dict[str, Any]:
    return svc.find_by_id(user_id).to_dict()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create(body: UserCreateRequest, svc: UserService = Depends(user_service)) -> Dict[str, Any]:
    user = svc.create(
        email=body.email,
        password=body.password,
        first_name=body.firstName,
        last_name=body.lastName,
    )
    return user.to_dict()


@router.put("/{user_id}", response_model=UserResponse)
def update(user_id: UserId, body: UserUpdateRequest, svc: UserService = Depends(user_service)) -> Dict[str, Any]:
    changes = {_FIELD_MAP[k]: v for k, v in body.model_dump(exclude_unset=True).items()}
    return svc.update(user_id, changes).to_dict()


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={405: {"description": "User authored or is assigned to tasks"}},
)
def destroy(user_id: UserId, svc: UserService = Depends(user_service)) -> Response:
    svc.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
