from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from helpdesk.core.config import Settings, get_settings
from helpdesk.core.errors import AppError
from helpdesk.models.entities import UserEntity
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.repositories.user_role_repository import UserRoleRepository
from helpdesk.services.auth_service import AuthService

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    return AuthService(
        user_repository=UserRepository(),
        user_role_repository=UserRoleRepository(),
        settings=settings,
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserEntity:
    if credentials is None:
        raise AppError.unauthorized("NOT_AUTHENTICATED", "Authentication required.")
    return auth_service.resolve_user(credentials.credentials)


CurrentUser = Annotated[UserEntity, Depends(get_current_user)]
