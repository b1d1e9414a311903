from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
import respx

from helpdesk.client.session import AuthSession
from helpdesk.client.transport import AuthenticationError, BackendError
from tests.helpers.fakes import ACTOR_ID

BASE_URL = "http://helpdesk.test/api"

USER = {
    "id": ACTOR_ID,
    "name": "Support Desk",
    "email": "support@example.com",
    "department_id": None,
    "department": None,
    "roles": [],
    "created_at": "2026-03-01T00:00:00Z",
}


def session_body(token: str = "token-1") -> dict:
    return {
        "data": {
            "access_token": token,
            "token_type": "bearer",
            "expires_at": "2026-03-02T00:00:00Z",
            "user": USER,
        }
    }


@pytest_asyncio.fixture
async def http() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        yield client


@pytest.mark.asyncio
@pytest.mark.respx(base_url=BASE_URL)
async def test_sign_in_sets_bearer_header_and_notifies(
    respx_mock: respx.MockRouter,
    http: httpx.AsyncClient,
) -> None:
    respx_mock.post("/auth/login").mock(return_value=httpx.Response(200, json=session_body()))
    me = respx_mock.get("/auth/me").mock(return_value=httpx.Response(200, json={"data": USER}))
    session = AuthSession(http)
    seen = []
    session.subscribe(seen.append)

    user = await session.sign_in("support@example.com", "secret-password")
    await session.refresh()

    assert user.id == ACTOR_ID
    assert session.is_authenticated is True
    assert http.headers["Authorization"] == "Bearer token-1"
    assert me.calls.last.request.headers["Authorization"] == "Bearer token-1"
    assert [item.email for item in seen] == ["support@example.com", "support@example.com"]


@pytest.mark.asyncio
@pytest.mark.respx(base_url=BASE_URL)
async def test_failed_sign_in_raises_authentication_error(
    respx_mock: respx.MockRouter,
    http: httpx.AsyncClient,
) -> None:
    respx_mock.post("/auth/login").mock(
        return_value=httpx.Response(
            401,
            json={"error": {"code": "INVALID_CREDENTIALS", "message": "Invalid email or password.", "details": {}}},
        )
    )
    session = AuthSession(http)

    with pytest.raises(AuthenticationError) as exc_info:
        await session.sign_in("support@example.com", "wrong-password")

    assert exc_info.value.code == "INVALID_CREDENTIALS"
    assert exc_info.value.message == "Invalid email or password."
    assert session.current_user is None
    assert "Authorization" not in http.headers


@pytest.mark.asyncio
@pytest.mark.respx(base_url=BASE_URL)
async def test_sign_up_opens_session(respx_mock: respx.MockRouter, http: httpx.AsyncClient) -> None:
    route = respx_mock.post("/auth/signup").mock(return_value=httpx.Response(201, json=session_body("token-2")))
    session = AuthSession(http)

    await session.sign_up("support@example.com", "secret-password", first_name="Support")

    assert route.called
    assert http.headers["Authorization"] == "Bearer token-2"


@pytest.mark.asyncio
@pytest.mark.respx(base_url=BASE_URL)
async def test_sign_out_clears_state_even_when_request_fails(
    respx_mock: respx.MockRouter,
    http: httpx.AsyncClient,
) -> None:
    respx_mock.post("/auth/login").mock(return_value=httpx.Response(200, json=session_body()))
    respx_mock.post("/auth/logout").mock(side_effect=httpx.ConnectError("offline"))
    session = AuthSession(http)
    seen = []
    session.subscribe(seen.append)
    await session.sign_in("support@example.com", "secret-password")

    await session.sign_out()

    assert session.current_user is None
    assert "Authorization" not in http.headers
    assert seen[-1] is None


@pytest.mark.asyncio
@pytest.mark.respx(base_url=BASE_URL)
async def test_refresh_with_expired_token_ends_session(
    respx_mock: respx.MockRouter,
    http: httpx.AsyncClient,
) -> None:
    respx_mock.post("/auth/login").mock(return_value=httpx.Response(200, json=session_body()))
    respx_mock.get("/auth/me").mock(
        return_value=httpx.Response(401, json={"error": {"code": "INVALID_TOKEN", "message": "Expired."}})
    )
    session = AuthSession(http)
    await session.sign_in("support@example.com", "secret-password")

    assert await session.refresh() is None
    assert session.is_authenticated is False


@pytest.mark.asyncio
@pytest.mark.respx(base_url=BASE_URL)
async def test_refresh_propagates_server_errors(
    respx_mock: respx.MockRouter,
    http: httpx.AsyncClient,
) -> None:
    respx_mock.post("/auth/login").mock(return_value=httpx.Response(200, json=session_body()))
    respx_mock.get("/auth/me").mock(return_value=httpx.Response(503, text="maintenance"))
    session = AuthSession(http)
    await session.sign_in("support@example.com", "secret-password")

    with pytest.raises(BackendError) as exc_info:
        await session.refresh()

    assert exc_info.value.status_code == 503
    assert session.is_authenticated is True


@pytest.mark.asyncio
async def test_refresh_without_token_is_noop(http: httpx.AsyncClient) -> None:
    assert await AuthSession(http).refresh() is None


@pytest.mark.asyncio
async def test_unsubscribe_stops_notifications(http: httpx.AsyncClient) -> None:
    session = AuthSession(http)
    seen = []
    unsubscribe = session.subscribe(seen.append)

    unsubscribe()
    session._set_user(None)

    assert seen == []
