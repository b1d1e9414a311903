import logging
from uuid import UUID

from psycopg.errors import UniqueViolation

from helpdesk.core.config import Settings
from helpdesk.core.errors import AppError
from helpdesk.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from helpdesk.models.entities import UserEntity
from helpdesk.models.schemas.auth import SessionRead, SignInRequest, SignUpRequest
from helpdesk.models.schemas.user import UserRead
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.repositories.user_role_repository import UserRoleRepository
from helpdesk.services.user_service import to_user_read

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        user_repository: UserRepository,
        user_role_repository: UserRoleRepository,
        settings: Settings,
    ) -> None:
        self.user_repository = user_repository
        self.user_role_repository = user_role_repository
        self.settings = settings

    def sign_up(self, payload: SignUpRequest) -> SessionRead:
        email = str(payload.email).lower()
        if self.user_repository.get_by_email(email) is not None:
            self._raise_email_taken(email)

        try:
            user = self.user_repository.create(
                name=self._display_name(payload),
                email=email,
                password_hash=hash_password(payload.password),
            )
        except UniqueViolation as exc:
            self._raise_email_taken(email, exc)

        logger.info("Registered user %s", user.id)
        return self._open_session(user)

    def sign_in(self, payload: SignInRequest) -> SessionRead:
        email = str(payload.email).lower()
        user = self.user_repository.get_by_email(email)
        if (
            user is None
            or user.password_hash is None
            or not verify_password(payload.password, user.password_hash)
        ):
            logger.warning("Rejected sign-in for %s", email)
            raise AppError.unauthorized("INVALID_CREDENTIALS", "Invalid email or password.")
        return self._open_session(user)

    def resolve_user(self, token: str) -> UserEntity:
        subject = decode_access_token(token, self.settings)
        user = None
        if subject is not None:
            try:
                user = self.user_repository.get_by_id(str(UUID(subject)))
            except ValueError:
                user = None
        if user is None:
            raise AppError.unauthorized("INVALID_TOKEN", "Session is invalid or has expired.")
        return user

    def describe_user(self, user: UserEntity) -> UserRead:
        return to_user_read(user, self.user_role_repository.list_for_user(user.id))

    def _open_session(self, user: UserEntity) -> SessionRead:
        token, expires_at = create_access_token(user.id, self.settings)
        roles = self.user_role_repository.list_for_user(user.id)
        return SessionRead(
            access_token=token,
            expires_at=expires_at,
            user=to_user_read(user, roles),
        )

    def _display_name(self, payload: SignUpRequest) -> str:
        parts = [part.strip() for part in (payload.first_name, payload.last_name) if part]
        full_name = " ".join(part for part in parts if part)
        return full_name or str(payload.email).split("@", 1)[0]

    def _raise_email_taken(self, email: str, exc: Exception | None = None) -> None:
        error = AppError.conflict("EMAIL_ALREADY_REGISTERED", "Email already registered.", email=email)
        if exc is not None:
            raise error from exc
        raise error
