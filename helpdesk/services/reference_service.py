import logging

from psycopg.errors import UniqueViolation

from helpdesk.core.database import get_connection
from helpdesk.core.errors import AppError
from helpdesk.models.entities import ReferenceEntity
from helpdesk.models.schemas.reference import ReferenceRead, ReferenceWriteRequest
from helpdesk.repositories.reference_repository import ReferenceRepository

logger = logging.getLogger(__name__)


class ReferenceService:
    """CRUD rules shared by priorities, categories, assignees, departments and roles."""

    def __init__(
        self,
        repository: ReferenceRepository,
        database_url: str | None = None,
    ) -> None:
        self.repository = repository
        self.database_url = database_url

    @property
    def kind(self) -> str:
        return self.repository.kind

    def list_entities(self) -> list[ReferenceRead]:
        return [self._to_read(entity) for entity in self.repository.list_all()]

    def create_entity(self, payload: ReferenceWriteRequest) -> ReferenceRead:
        name = self._validate_name(payload.name)

        try:
            created = self.repository.create(name=name)
        except UniqueViolation as exc:
            self._raise_name_conflict(name=name, exc=exc)

        logger.info("Created %s %s (%s)", self.kind, created.id, created.name)
        return self._to_read(created)

    def update_entity(self, entity_id: int, payload: ReferenceWriteRequest) -> ReferenceRead:
        name = self._validate_name(payload.name)

        with get_connection(self.database_url) as connection:
            existing = self.repository.get_by_id(entity_id, connection=connection)
            if existing is None:
                self._raise_not_found(entity_id)

            try:
                updated = self.repository.update(
                    entity_id=entity_id,
                    name=name,
                    connection=connection,
                )
            except UniqueViolation as exc:
                self._raise_name_conflict(name=name, exc=exc)

            if updated is None:
                self._raise_not_found(entity_id)
            return self._to_read(updated)

    def delete_entity(self, entity_id: int) -> None:
        with get_connection(self.database_url) as connection:
            existing = self.repository.get_by_id(entity_id, connection=connection)
            if existing is None:
                self._raise_not_found(entity_id)

            deleted = self.repository.delete(entity_id, connection=connection)
            if not deleted:
                self._raise_not_found(entity_id)
        logger.info("Deleted %s %s", self.kind, entity_id)

    def _to_read(self, entity: ReferenceEntity) -> ReferenceRead:
        return ReferenceRead(id=entity.id, name=entity.name)

    def _validate_name(self, name: str) -> str:
        normalized = name.strip()
        if not 1 <= len(normalized) <= 100:
            raise AppError.bad_request(
                f"INVALID_{self.kind.upper()}_NAME",
                f"{self.kind.capitalize()} name length must be between 1 and 100 characters.",
            )
        return normalized

    def _raise_name_conflict(self, *, name: str, exc: UniqueViolation) -> None:
        raise AppError.conflict(
            f"{self.kind.upper()}_NAME_CONFLICT",
            f"{self.kind.capitalize()} name already exists.",
            name=name,
        ) from exc

    def _raise_not_found(self, entity_id: int) -> None:
        raise AppError.not_found(self.kind, id=entity_id)
