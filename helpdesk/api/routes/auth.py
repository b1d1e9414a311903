from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from helpdesk.api.deps import CurrentUser, get_auth_service
from helpdesk.models.schemas.auth import SessionDataResponse, SignInRequest, SignUpRequest
from helpdesk.models.schemas.user import UserDataResponse
from helpdesk.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


@router.post("/signup", response_model=SessionDataResponse, status_code=status.HTTP_201_CREATED)
def sign_up(
    payload: SignUpRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> SessionDataResponse:
    return SessionDataResponse(data=auth_service.sign_up(payload))


@router.post("/login", response_model=SessionDataResponse)
def sign_in(
    payload: SignInRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> SessionDataResponse:
    return SessionDataResponse(data=auth_service.sign_in(payload))


@router.get("/me", response_model=UserDataResponse)
def current_user(
    user: CurrentUser,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserDataResponse:
    return UserDataResponse(data=auth_service.describe_user(user))


# Tokens are stateless; the client drops its copy.
@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(_: CurrentUser) -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)
