import logging
from uuid import UUID

from psycopg.errors import ForeignKeyViolation, UniqueViolation

from helpdesk.core.database import get_connection
from helpdesk.core.errors import AppError
from helpdesk.models.entities import UserEntity, UserRoleEntity
from helpdesk.models.schemas.reference import ReferenceRead
from helpdesk.models.schemas.user import (
    UserCreateRequest,
    UserRead,
    UserRoleRead,
    UserUpdateRequest,
)
from helpdesk.repositories.reference_repository import ReferenceRepository
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.repositories.user_role_repository import UserRoleRepository

logger = logging.getLogger(__name__)


def to_user_read(user: UserEntity, roles: list[UserRoleEntity] | None = None) -> UserRead:
    department = None
    if user.department_id is not None and user.department_name is not None:
        department = ReferenceRead(id=user.department_id, name=user.department_name)
    return UserRead(
        id=user.id,
        name=user.name,
        email=user.email,
        department_id=user.department_id,
        department=department,
        roles=[ReferenceRead(id=role.role_id, name=role.role_name) for role in roles or []],
        created_at=user.created_at,
    )


def to_user_role_read(role: UserRoleEntity) -> UserRoleRead:
    return UserRoleRead(
        id=role.id,
        user_id=role.user_id,
        role=ReferenceRead(id=role.role_id, name=role.role_name),
        assigned_at=role.assigned_at,
    )


class UserService:
    def __init__(
        self,
        user_repository: UserRepository,
        user_role_repository: UserRoleRepository,
        role_repository: ReferenceRepository,
        database_url: str | None = None,
    ) -> None:
        self.user_repository = user_repository
        self.user_role_repository = user_role_repository
        self.role_repository = role_repository
        self.database_url = database_url

    def list_users(self) -> list[UserRead]:
        with get_connection(self.database_url) as connection:
            users = self.user_repository.list_all(connection=connection)
            roles = self.user_role_repository.list_for_users(
                [user.id for user in users],
                connection=connection,
            )
        return [to_user_read(user, roles.get(user.id, [])) for user in users]

    def get_user(self, user_id: str) -> UserRead:
        normalized_id = self._normalize_user_id(user_id)
        with get_connection(self.database_url) as connection:
            user = self.user_repository.get_by_id(normalized_id, connection=connection)
            if user is None:
                self._raise_user_not_found(user_id)
            roles = self.user_role_repository.list_for_user(normalized_id, connection=connection)
        return to_user_read(user, roles)

    def create_user(self, payload: UserCreateRequest) -> UserRead:
        name = self._validate_name(payload.name)

        try:
            created = self.user_repository.create(
                name=name,
                email=str(payload.email),
                department_id=payload.department_id,
            )
        except UniqueViolation as exc:
            self._raise_email_conflict(str(payload.email), exc)
        except ForeignKeyViolation as exc:
            self._raise_invalid_department(payload.department_id, exc)

        logger.info("Created user %s", created.id)
        return to_user_read(created)

    def update_user(self, user_id: str, payload: UserUpdateRequest) -> UserRead:
        normalized_id = self._normalize_user_id(user_id)
        fields = payload.model_dump(exclude_unset=True)
        if "name" in fields:
            fields["name"] = self._validate_name(fields["name"] or "")
        if "email" in fields:
            if fields["email"] is None:
                raise AppError.bad_request("INVALID_USER_EMAIL", "User email cannot be empty.")
            fields["email"] = str(fields["email"])

        try:
            with get_connection(self.database_url) as connection:
                updated = self.user_repository.update(
                    user_id=normalized_id,
                    fields=fields,
                    connection=connection,
                )
                if updated is None:
                    self._raise_user_not_found(user_id)
                roles = self.user_role_repository.list_for_user(
                    normalized_id,
                    connection=connection,
                )
        except UniqueViolation as exc:
            self._raise_email_conflict(fields.get("email", ""), exc)
        except ForeignKeyViolation as exc:
            self._raise_invalid_department(fields.get("department_id"), exc)

        return to_user_read(updated, roles)

    def delete_user(self, user_id: str) -> None:
        normalized_id = self._normalize_user_id(user_id)
        deleted = self.user_repository.delete(normalized_id)
        if not deleted:
            self._raise_user_not_found(user_id)
        logger.info("Deleted user %s", normalized_id)

    def list_user_roles(self, user_id: str) -> list[UserRoleRead]:
        normalized_id = self._normalize_user_id(user_id)
        with get_connection(self.database_url) as connection:
            if self.user_repository.get_by_id(normalized_id, connection=connection) is None:
                self._raise_user_not_found(user_id)
            roles = self.user_role_repository.list_for_user(normalized_id, connection=connection)
        return [to_user_role_read(role) for role in roles]

    def replace_user_roles(self, user_id: str, role_ids: list[int]) -> list[UserRoleRead]:
        normalized_id = self._normalize_user_id(user_id)
        deduped_role_ids = list(dict.fromkeys(role_ids))

        with get_connection(self.database_url) as connection:
            if self.user_repository.get_by_id(normalized_id, connection=connection) is None:
                self._raise_user_not_found(user_id)

            existing = self.role_repository.list_by_ids(deduped_role_ids, connection=connection)
            existing_ids = {role.id for role in existing}
            missing_ids = [role_id for role_id in deduped_role_ids if role_id not in existing_ids]
            if missing_ids:
                raise AppError.bad_request(
                    "INVALID_ROLE_IDS",
                    "Some role IDs do not exist.",
                    missing_role_ids=missing_ids,
                )

            self.user_role_repository.replace_roles(
                user_id=normalized_id,
                role_ids=deduped_role_ids,
                connection=connection,
            )
            roles = self.user_role_repository.list_for_user(normalized_id, connection=connection)
        return [to_user_role_read(role) for role in roles]

    def list_users_by_role(self, role_id: int) -> list[UserRead]:
        with get_connection(self.database_url) as connection:
            if self.role_repository.get_by_id(role_id, connection=connection) is None:
                raise AppError.not_found("role", id=role_id)
            users = self.user_repository.list_by_role(role_id, connection=connection)
            roles = self.user_role_repository.list_for_users(
                [user.id for user in users],
                connection=connection,
            )
        return [to_user_read(user, roles.get(user.id, [])) for user in users]

    def _validate_name(self, name: str) -> str:
        normalized = name.strip()
        if not 1 <= len(normalized) <= 200:
            raise AppError.bad_request(
                "INVALID_USER_NAME",
                "User name length must be between 1 and 200 characters.",
            )
        return normalized

    def _normalize_user_id(self, user_id: str) -> str:
        try:
            return str(UUID(user_id))
        except ValueError:
            self._raise_user_not_found(user_id)

    def _raise_email_conflict(self, email: str, exc: UniqueViolation) -> None:
        raise AppError.conflict(
            "USER_EMAIL_CONFLICT",
            "A user with this email already exists.",
            email=email,
        ) from exc

    def _raise_invalid_department(
        self,
        department_id: int | None,
        exc: ForeignKeyViolation,
    ) -> None:
        raise AppError.invalid_reference(
            "Department does not exist.",
            department_id=department_id,
        ) from exc

    def _raise_user_not_found(self, user_id: str) -> None:
        raise AppError.not_found("user", user_id=user_id)
