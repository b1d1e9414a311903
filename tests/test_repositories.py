import os
from datetime import UTC, datetime

import pytest
from psycopg import connect
from psycopg.errors import CheckViolation, ForeignKeyViolation, UniqueViolation

from helpdesk.repositories.activity_repository import ActivityRepository
from helpdesk.repositories.history_repository import HistoryRepository
from helpdesk.repositories.reference_repository import ReferenceRepository
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.repositories.user_role_repository import UserRoleRepository
from tests.helpers.db_env import isolated_database


@pytest.fixture(scope="module")
def repository_database_url() -> str:
    base_url = os.getenv("TEST_DATABASE_URL")
    if not base_url:
        pytest.skip("Set TEST_DATABASE_URL to run repository tests.")

    with isolated_database(base_url, schema_prefix="helpdesk_repo_test") as scoped_url:
        yield scoped_url


@pytest.fixture(autouse=True)
def clean_database(repository_database_url: str) -> None:
    with connect(repository_database_url, autocommit=True) as connection:
        with connection.cursor() as cursor:
            cursor.execute(
                """
                TRUNCATE TABLE
                    ticket_history, ticket_notes, ticket_comments, tickets, user_roles, users,
                    ticket_priorities, ticket_categories, assignees, departments, roles
                RESTART IDENTITY CASCADE
                """
            )


def test_ticket_repository_crud(repository_database_url: str) -> None:
    priorities = ReferenceRepository("priority", database_url=repository_database_url)
    repository = TicketRepository(database_url=repository_database_url)
    high = priorities.create(name="HIGH")

    created = repository.create(title="Login broken", description="blank page", priority_id=high.id)
    assert created.status == "OPEN"
    assert created.priority_name == "HIGH"
    assert created.closed_at is None

    loaded = repository.get_by_id(created.id)
    assert loaded is not None
    assert loaded.title == "Login broken"

    updated = repository.update(
        ticket_id=created.id,
        fields={"status": "CLOSED", "closed_at": datetime.now(UTC)},
    )
    assert updated is not None
    assert updated.status == "CLOSED"
    assert updated.title == "Login broken"
    assert updated.updated_at >= created.updated_at

    with pytest.raises(ValueError):
        repository.update(ticket_id=created.id, fields={"creator_id": None})

    assert repository.delete(created.id) is True
    assert repository.get_by_id(created.id) is None


def test_ticket_status_and_reference_constraints(repository_database_url: str) -> None:
    repository = TicketRepository(database_url=repository_database_url)

    with pytest.raises(CheckViolation):
        repository.create(title="invalid status", status="DONE")

    with pytest.raises(ForeignKeyViolation):
        repository.create(title="missing priority", priority_id=999)


def test_reference_repository_unique_name_ci(repository_database_url: str) -> None:
    repository = ReferenceRepository("category", database_url=repository_database_url)

    created = repository.create(name="Bug")
    with pytest.raises(UniqueViolation):
        repository.create(name="bug")

    assert repository.get_by_name("BUG") is not None

    updated = repository.update(entity_id=created.id, name="Defect")
    assert updated is not None
    assert [entity.name for entity in repository.list_all()] == ["Defect"]

    assert repository.delete(created.id) is True
    assert repository.get_by_id(created.id) is None


def test_deleting_reference_nulls_ticket_link(repository_database_url: str) -> None:
    assignees = ReferenceRepository("assignee", database_url=repository_database_url)
    tickets = TicketRepository(database_url=repository_database_url)

    dana = assignees.create(name="Dana Reyes")
    ticket = tickets.create(title="Printer jam", assignee_id=dana.id)
    assert ticket.assignee_name == "Dana Reyes"

    assignees.delete(dana.id)
    reloaded = tickets.get_by_id(ticket.id)
    assert reloaded is not None
    assert reloaded.assignee_id is None


def test_ticket_repository_list_filtered(repository_database_url: str) -> None:
    priorities = ReferenceRepository("priority", database_url=repository_database_url)
    categories = ReferenceRepository("category", database_url=repository_database_url)
    repository = TicketRepository(database_url=repository_database_url)

    low = priorities.create(name="LOW")
    high = priorities.create(name="HIGH")
    bug = categories.create(name="BUG")
    feature = categories.create(name="FEATURE")

    t1 = repository.create(title="Deploy backend service", priority_id=high.id, category_id=bug.id)
    t2 = repository.create(title="Polish frontend page", priority_id=low.id, category_id=feature.id)
    t3 = repository.create(title="Release checklist", status="CLOSED", priority_id=low.id, category_id=bug.id)

    by_status, total_status = repository.list_filtered(statuses=["OPEN", "IN_PROGRESS"], limit=20, offset=0)
    assert total_status == 2
    assert {ticket.id for ticket in by_status} == {t1.id, t2.id}

    combined, total_combined = repository.list_filtered(
        category_ids=[bug.id],
        priority_ids=[low.id],
        limit=20,
        offset=0,
    )
    assert total_combined == 1
    assert [ticket.id for ticket in combined] == [t3.id]

    by_search, total_search = repository.list_filtered(q="frontend", limit=20, offset=0)
    assert total_search == 1
    assert [ticket.id for ticket in by_search] == [t2.id]

    by_title, _ = repository.list_filtered(sort="title", order="asc", limit=20, offset=0)
    assert [ticket.title for ticket in by_title] == [
        "Deploy backend service",
        "Polish frontend page",
        "Release checklist",
    ]

    paged, total_paged = repository.list_filtered(limit=2, offset=0)
    assert total_paged == 3
    assert len(paged) == 2

    counts = repository.status_counts()
    assert counts == {"total": 3, "open": 2, "in_progress": 0, "closed": 1, "high_priority": 1}


def test_users_roles_and_activity(repository_database_url: str) -> None:
    departments = ReferenceRepository("department", database_url=repository_database_url)
    roles = ReferenceRepository("role", database_url=repository_database_url)
    users = UserRepository(database_url=repository_database_url)
    user_roles = UserRoleRepository(database_url=repository_database_url)
    tickets = TicketRepository(database_url=repository_database_url)
    comments = ActivityRepository("comment", database_url=repository_database_url)
    history = HistoryRepository(database_url=repository_database_url)

    support = departments.create(name="Support")
    admin = roles.create(name="Admin")
    agent = roles.create(name="Agent")

    user = users.create(name="Dana Reyes", email="dana@example.com", department_id=support.id)
    assert user.department_name == "Support"
    with pytest.raises(UniqueViolation):
        users.create(name="Dana again", email="DANA@example.com")
    assert users.get_by_email("Dana@Example.com") is not None

    user_roles.replace_roles(user_id=user.id, role_ids=[agent.id, admin.id, agent.id])
    assert [role.role_name for role in user_roles.list_for_user(user.id)] == ["Admin", "Agent"]
    assert [u.id for u in users.list_by_role(admin.id)] == [user.id]
    assert users.count_by_department() == [("Support", 1)]

    ticket = tickets.create(title="VPN drops", creator_id=user.id)
    assert ticket.creator_name == "Dana Reyes"

    comment = comments.create(ticket_id=ticket.id, user_id=user.id, content="Reproduced")
    assert comment.author_name == "Dana Reyes"
    assert [entry.id for entry in comments.list_for_ticket(ticket.id)] == [comment.id]

    history.record(ticket_id=ticket.id, user_id=user.id, action="created", details={"title": "VPN drops"})
    history.record(ticket_id=ticket.id, user_id=user.id, action="updated", details={"changes": {}})
    assert [entry.action for entry in history.list_for_ticket(ticket.id)] == ["updated", "created"]

    tickets.delete(ticket.id)
    assert comments.list_for_ticket(ticket.id) == []
    assert history.list_for_ticket(ticket.id) == []
