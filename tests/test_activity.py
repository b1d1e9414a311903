from datetime import UTC, datetime

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from helpdesk.api.routes.activities import get_comment_service, get_note_service
from helpdesk.core.errors import AppError
from helpdesk.main import app
from helpdesk.models.entities import ActivityEntity
from helpdesk.models.schemas.activity import ActivityCreateRequest
from helpdesk.services.activity_service import ActivityService
from tests.helpers.fakes import ACTOR_ID, fake_connection

TICKET_ID = "0f8fad5b-d9cb-469f-a165-70867728950e"


class _FakeActivityRepository:
    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.entries: dict[int, ActivityEntity] = {}

    def create(
        self,
        *,
        ticket_id: str,
        user_id: str | None,
        content: str,
        connection: object | None = None,
    ) -> ActivityEntity:
        entry = ActivityEntity(
            id=len(self.entries) + 1,
            ticket_id=ticket_id,
            user_id=user_id,
            content=content,
            created_at=datetime.now(UTC),
            author_name="Support Desk" if user_id else None,
        )
        self.entries[entry.id] = entry
        return entry

    def list_for_ticket(self, ticket_id: str, connection: object | None = None) -> list[ActivityEntity]:
        return [entry for entry in self.entries.values() if entry.ticket_id == ticket_id]

    def delete(self, activity_id: int, connection: object | None = None) -> bool:
        return self.entries.pop(activity_id, None) is not None


class _FakeTicketRepository:
    def get_by_id(self, ticket_id: str, connection: object | None = None) -> object | None:
        return object() if ticket_id == TICKET_ID else None


@pytest.fixture
def comment_service(monkeypatch: pytest.MonkeyPatch) -> ActivityService:
    monkeypatch.setattr("helpdesk.services.activity_service.get_connection", fake_connection)
    return ActivityService(
        activity_repository=_FakeActivityRepository("comment"),
        ticket_repository=_FakeTicketRepository(),
    )


def test_add_comment_defaults_author_to_actor(comment_service: ActivityService) -> None:
    created = comment_service.add(
        TICKET_ID,
        ActivityCreateRequest(content="  Restarted the service. "),
        actor_id=ACTOR_ID,
    )

    assert created.content == "Restarted the service."
    assert created.user_id == ACTOR_ID
    assert created.author_name == "Support Desk"
    assert [entry.id for entry in comment_service.list_for_ticket(TICKET_ID)] == [created.id]


def test_add_comment_validates_content(comment_service: ActivityService) -> None:
    with pytest.raises(AppError) as exc:
        comment_service.add(TICKET_ID, ActivityCreateRequest(content="  "), actor_id=ACTOR_ID)
    assert exc.value.status_code == status.HTTP_400_BAD_REQUEST
    assert exc.value.code == "INVALID_COMMENT_CONTENT"


def test_add_comment_to_missing_ticket(comment_service: ActivityService) -> None:
    with pytest.raises(AppError) as exc:
        comment_service.add(
            "00000000-0000-0000-0000-000000000404",
            ActivityCreateRequest(content="hello"),
        )
    assert exc.value.status_code == status.HTTP_404_NOT_FOUND
    assert exc.value.code == "TICKET_NOT_FOUND"


def test_add_comment_rejects_malformed_user(comment_service: ActivityService) -> None:
    with pytest.raises(AppError) as exc:
        comment_service.add(TICKET_ID, ActivityCreateRequest(content="hi", user_id="bob"))
    assert exc.value.code == "INVALID_REFERENCE"


def test_delete_missing_comment(comment_service: ActivityService) -> None:
    with pytest.raises(AppError) as exc:
        comment_service.delete(42)
    assert exc.value.status_code == status.HTTP_404_NOT_FOUND
    assert exc.value.code == "COMMENT_NOT_FOUND"


def test_comment_and_note_routes(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("helpdesk.services.activity_service.get_connection", fake_connection)
    comments = ActivityService(
        activity_repository=_FakeActivityRepository("comment"),
        ticket_repository=_FakeTicketRepository(),
    )
    notes = ActivityService(
        activity_repository=_FakeActivityRepository("note"),
        ticket_repository=_FakeTicketRepository(),
    )
    app.dependency_overrides[get_comment_service] = lambda: comments
    app.dependency_overrides[get_note_service] = lambda: notes

    created = client.post(f"/api/tickets/{TICKET_ID}/comments", json={"content": "On it"})
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["data"]["user_id"] == ACTOR_ID

    note = client.post(f"/api/tickets/{TICKET_ID}/notes", json={"content": "Customer is VIP"})
    assert note.status_code == status.HTTP_201_CREATED

    listed = client.get(f"/api/tickets/{TICKET_ID}/comments")
    assert [item["content"] for item in listed.json()["data"]] == ["On it"]
    assert len(client.get(f"/api/tickets/{TICKET_ID}/notes").json()["data"]) == 1

    comment_id = created.json()["data"]["id"]
    assert client.delete(f"/api/comments/{comment_id}").status_code == status.HTTP_204_NO_CONTENT
    missing = client.delete(f"/api/comments/{comment_id}")
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert missing.json()["error"]["code"] == "COMMENT_NOT_FOUND"

    note_id = note.json()["data"]["id"]
    assert client.delete(f"/api/notes/{note_id}").status_code == status.HTTP_204_NO_CONTENT
