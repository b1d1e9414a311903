import pytest
from fastapi import status
from psycopg.errors import UniqueViolation

from helpdesk.core.errors import AppError
from helpdesk.models.entities import ReferenceEntity
from helpdesk.models.schemas.reference import ReferenceWriteRequest
from helpdesk.services.reference_service import ReferenceService
from tests.helpers.fakes import fake_connection


class _FakeReferenceRepository:
    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.entities: dict[int, ReferenceEntity] = {
            1: ReferenceEntity(id=1, name="LOW"),
            2: ReferenceEntity(id=2, name="HIGH"),
        }
        self.raise_conflict = False

    def list_all(self, connection: object | None = None) -> list[ReferenceEntity]:
        return sorted(self.entities.values(), key=lambda entity: entity.name)

    def create(self, *, name: str, connection: object | None = None) -> ReferenceEntity:
        if self.raise_conflict:
            raise UniqueViolation("duplicate")
        created = ReferenceEntity(id=max(self.entities) + 1, name=name)
        self.entities[created.id] = created
        return created

    def get_by_id(self, entity_id: int, connection: object | None = None) -> ReferenceEntity | None:
        return self.entities.get(entity_id)

    def update(
        self,
        *,
        entity_id: int,
        name: str,
        connection: object | None = None,
    ) -> ReferenceEntity | None:
        if self.raise_conflict:
            raise UniqueViolation("duplicate")
        if entity_id not in self.entities:
            return None
        self.entities[entity_id] = ReferenceEntity(id=entity_id, name=name)
        return self.entities[entity_id]

    def delete(self, entity_id: int, connection: object | None = None) -> bool:
        return self.entities.pop(entity_id, None) is not None


@pytest.fixture
def priority_service(monkeypatch: pytest.MonkeyPatch) -> ReferenceService:
    monkeypatch.setattr("helpdesk.services.reference_service.get_connection", fake_connection)
    return ReferenceService(repository=_FakeReferenceRepository("priority"))


def test_reference_service_validates_name(priority_service: ReferenceService) -> None:
    with pytest.raises(AppError) as exc:
        priority_service.create_entity(ReferenceWriteRequest(name="   "))
    assert exc.value.status_code == status.HTTP_400_BAD_REQUEST
    assert exc.value.code == "INVALID_PRIORITY_NAME"

    with pytest.raises(AppError) as exc:
        priority_service.create_entity(ReferenceWriteRequest(name="x" * 101))
    assert exc.value.code == "INVALID_PRIORITY_NAME"


def test_reference_service_handles_name_conflict(priority_service: ReferenceService) -> None:
    priority_service.repository.raise_conflict = True
    with pytest.raises(AppError) as exc:
        priority_service.create_entity(ReferenceWriteRequest(name="low"))
    assert exc.value.status_code == status.HTTP_409_CONFLICT
    assert exc.value.code == "PRIORITY_NAME_CONFLICT"


def test_reference_service_create_update_and_delete(priority_service: ReferenceService) -> None:
    created = priority_service.create_entity(ReferenceWriteRequest(name="  MEDIUM "))
    assert created.name == "MEDIUM"

    updated = priority_service.update_entity(created.id, ReferenceWriteRequest(name="NORMAL"))
    assert updated.name == "NORMAL"

    priority_service.delete_entity(created.id)
    with pytest.raises(AppError) as exc:
        priority_service.delete_entity(created.id)
    assert exc.value.status_code == status.HTTP_404_NOT_FOUND
    assert exc.value.code == "PRIORITY_NOT_FOUND"


def test_reference_service_update_missing(priority_service: ReferenceService) -> None:
    with pytest.raises(AppError) as exc:
        priority_service.update_entity(99, ReferenceWriteRequest(name="URGENT"))
    assert exc.value.code == "PRIORITY_NOT_FOUND"
    assert exc.value.details == {"id": 99}


def test_reference_service_lists_by_name(priority_service: ReferenceService) -> None:
    names = [entity.name for entity in priority_service.list_entities()]
    assert names == ["HIGH", "LOW"]
