from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from helpdesk.api.deps import get_auth_service
from helpdesk.core.config import Settings
from helpdesk.core.errors import AppError
from helpdesk.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from helpdesk.main import app
from helpdesk.models.entities import UserEntity, UserRoleEntity
from helpdesk.models.schemas.auth import SignInRequest, SignUpRequest
from helpdesk.services.auth_service import AuthService

SETTINGS = Settings(jwt_secret="test-secret", access_token_expire_minutes=5)


class _FakeUserRepository:
    def __init__(self) -> None:
        self.users: dict[str, UserEntity] = {}

    def create(
        self,
        *,
        name: str,
        email: str,
        department_id: int | None = None,
        password_hash: str | None = None,
        connection: object | None = None,
    ) -> UserEntity:
        user = UserEntity(
            id=str(uuid4()),
            name=name,
            email=email,
            department_id=department_id,
            created_at=datetime.now(UTC),
            password_hash=password_hash,
        )
        self.users[user.id] = user
        return user

    def get_by_id(self, user_id: str, connection: object | None = None) -> UserEntity | None:
        return self.users.get(user_id)

    def get_by_email(self, email: str, connection: object | None = None) -> UserEntity | None:
        return next((user for user in self.users.values() if user.email.lower() == email.lower()), None)


class _FakeUserRoleRepository:
    def list_for_user(self, user_id: str, connection: object | None = None) -> list[UserRoleEntity]:
        return [
            UserRoleEntity(id=1, user_id=user_id, role_id=2, role_name="Agent", assigned_at=datetime.now(UTC))
        ]


@pytest.fixture
def auth_service() -> AuthService:
    return AuthService(
        user_repository=_FakeUserRepository(),
        user_role_repository=_FakeUserRoleRepository(),
        settings=SETTINGS,
    )


def test_password_hashing_round_trip() -> None:
    hashed = hash_password("correct horse battery")
    assert hashed != "correct horse battery"
    assert verify_password("correct horse battery", hashed)
    assert not verify_password("wrong", hashed)


def test_access_token_subject_and_expiry() -> None:
    token, expires_at = create_access_token("user-1", SETTINGS)
    assert decode_access_token(token, SETTINGS) == "user-1"
    assert expires_at > datetime.now(UTC)

    expired, _ = create_access_token("user-1", SETTINGS, expires_delta=timedelta(seconds=-5))
    assert decode_access_token(expired, SETTINGS) is None
    assert decode_access_token(token, Settings(jwt_secret="other-secret")) is None


def test_sign_up_builds_name_and_session(auth_service: AuthService) -> None:
    session = auth_service.sign_up(
        SignUpRequest(email="Dana@Example.com", password="s3cret-pass", first_name="Dana", last_name="Reyes")
    )
    assert session.user.name == "Dana Reyes"
    assert session.user.email == "dana@example.com"
    assert [role.name for role in session.user.roles] == ["Agent"]
    assert decode_access_token(session.access_token, SETTINGS) == session.user.id

    anonymous = auth_service.sign_up(SignUpRequest(email="lee@example.com", password="s3cret-pass"))
    assert anonymous.user.name == "lee"


def test_sign_up_rejects_taken_email(auth_service: AuthService) -> None:
    auth_service.sign_up(SignUpRequest(email="dana@example.com", password="s3cret-pass"))
    with pytest.raises(AppError) as exc:
        auth_service.sign_up(SignUpRequest(email="DANA@example.com", password="another-pass"))
    assert exc.value.status_code == status.HTTP_409_CONFLICT
    assert exc.value.code == "EMAIL_ALREADY_REGISTERED"


def test_sign_in_and_resolve_user(auth_service: AuthService) -> None:
    auth_service.sign_up(SignUpRequest(email="dana@example.com", password="s3cret-pass"))

    session = auth_service.sign_in(SignInRequest(email="dana@example.com", password="s3cret-pass"))
    resolved = auth_service.resolve_user(session.access_token)
    assert resolved.email == "dana@example.com"

    with pytest.raises(AppError) as exc:
        auth_service.sign_in(SignInRequest(email="dana@example.com", password="wrong-pass"))
    assert exc.value.status_code == status.HTTP_401_UNAUTHORIZED
    assert exc.value.code == "INVALID_CREDENTIALS"

    with pytest.raises(AppError) as exc:
        auth_service.resolve_user("not-a-token")
    assert exc.value.code == "INVALID_TOKEN"


def test_auth_routes_issue_usable_tokens(anonymous_client: TestClient, auth_service: AuthService) -> None:
    app.dependency_overrides[get_auth_service] = lambda: auth_service

    signup = anonymous_client.post(
        "/api/auth/signup",
        json={"email": "sam@example.com", "password": "s3cret-pass", "first_name": "Sam"},
    )
    assert signup.status_code == status.HTTP_201_CREATED
    assert signup.json()["data"]["token_type"] == "bearer"

    login = anonymous_client.post(
        "/api/auth/login",
        json={"email": "sam@example.com", "password": "s3cret-pass"},
    )
    assert login.status_code == status.HTTP_200_OK
    token = login.json()["data"]["access_token"]

    me = anonymous_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["data"]["name"] == "Sam"
    assert me.json()["data"]["roles"] == [{"id": 2, "name": "Agent"}]

    logout = anonymous_client.post("/api/auth/logout", headers={"Authorization": f"Bearer {token}"})
    assert logout.status_code == status.HTTP_204_NO_CONTENT


def test_auth_routes_reject_bad_input(anonymous_client: TestClient, auth_service: AuthService) -> None:
    app.dependency_overrides[get_auth_service] = lambda: auth_service

    short_password = anonymous_client.post(
        "/api/auth/signup",
        json={"email": "sam@example.com", "password": "short"},
    )
    assert short_password.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT

    unknown = anonymous_client.post(
        "/api/auth/login",
        json={"email": "ghost@example.com", "password": "whatever-pass"},
    )
    assert unknown.status_code == status.HTTP_401_UNAUTHORIZED
    assert unknown.json()["error"]["code"] == "INVALID_CREDENTIALS"

    me = anonymous_client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert me.status_code == status.HTTP_401_UNAUTHORIZED
    assert me.json()["error"]["code"] == "INVALID_TOKEN"
