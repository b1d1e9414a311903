from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient

from helpdesk.api.deps import get_current_user
from helpdesk.main import app
from helpdesk.models.entities import UserEntity
from tests.helpers.fakes import ACTOR_ID

load_dotenv(Path(__file__).resolve().parents[1] / ".env")


@pytest.fixture
def current_user() -> UserEntity:
    return UserEntity(
        id=ACTOR_ID,
        name="Support Desk",
        email="support@example.com",
        department_id=1,
        created_at=datetime(2026, 3, 1, tzinfo=UTC),
        department_name="Support",
    )


@pytest.fixture
def client(current_user: UserEntity) -> Iterator[TestClient]:
    app.dependency_overrides[get_current_user] = lambda: current_user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client() -> Iterator[TestClient]:
    yield TestClient(app)
    app.dependency_overrides.clear()
