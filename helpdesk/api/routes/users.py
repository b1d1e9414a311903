from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from helpdesk.models.schemas.user import (
    UserCreateRequest,
    UserDataResponse,
    UserListResponse,
    UserRoleListResponse,
    UserRolesWriteRequest,
    UserUpdateRequest,
)
from helpdesk.repositories.reference_repository import ReferenceRepository
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.repositories.user_role_repository import UserRoleRepository
from helpdesk.services.user_service import UserService

router = APIRouter()


def get_user_service() -> UserService:
    return UserService(
        user_repository=UserRepository(),
        user_role_repository=UserRoleRepository(),
        role_repository=ReferenceRepository("role"),
    )


@router.get("/users", response_model=UserListResponse)
def list_users(
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserListResponse:
    return UserListResponse(data=user_service.list_users())


@router.post("/users", response_model=UserDataResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreateRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserDataResponse:
    return UserDataResponse(data=user_service.create_user(payload))


@router.get("/users/{user_id}", response_model=UserDataResponse)
def get_user(
    user_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserDataResponse:
    return UserDataResponse(data=user_service.get_user(user_id))


@router.patch("/users/{user_id}", response_model=UserDataResponse)
def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserDataResponse:
    return UserDataResponse(data=user_service.update_user(user_id, payload))


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> Response:
    user_service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/{user_id}/roles", response_model=UserRoleListResponse)
def list_user_roles(
    user_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserRoleListResponse:
    return UserRoleListResponse(data=user_service.list_user_roles(user_id))


@router.put("/users/{user_id}/roles", response_model=UserRoleListResponse)
def replace_user_roles(
    user_id: str,
    payload: UserRolesWriteRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserRoleListResponse:
    roles = user_service.replace_user_roles(user_id, payload.role_ids)
    return UserRoleListResponse(data=roles)


@router.get("/roles/{role_id}/users", response_model=UserListResponse)
def list_users_by_role(
    role_id: int,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserListResponse:
    return UserListResponse(data=user_service.list_users_by_role(role_id))
