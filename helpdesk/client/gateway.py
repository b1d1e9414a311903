"""HTTP gateways over the helpdesk REST API.

Every resource is reached through the same four capabilities
(``fetch_collection``, ``insert``, ``update``, ``delete``) so the stateful
client pieces can be exercised against an in-memory fake.
"""

from typing import Any, Literal, Protocol

import httpx

from helpdesk.client.session import AuthSession
from helpdesk.client.transport import BackendError, send_json
from helpdesk.core.config import get_settings

__all__ = ["BackendError", "HelpdeskClient", "HttpResourceGateway", "ResourceGateway"]


class ResourceGateway(Protocol):
    async def fetch_collection(self, **params: Any) -> list[dict[str, Any]]: ...

    async def insert(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    async def update(self, resource_id: str | int, patch: dict[str, Any]) -> dict[str, Any]: ...

    async def delete(self, resource_id: str | int) -> None: ...


class HttpResourceGateway:
    """CRUD for one REST collection.

    ``item_path`` covers resources whose items live outside the collection
    path, e.g. comments are listed under a ticket but deleted at ``/comments/{id}``.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        path: str,
        *,
        item_path: str | None = None,
        update_method: Literal["PUT", "PATCH"] = "PUT",
    ) -> None:
        self._http = http
        self.path = path
        self.item_path = item_path or path
        self.update_method = update_method

    async def fetch_collection(self, **params: Any) -> list[dict[str, Any]]:
        query = {key: value for key, value in params.items() if value is not None}
        body = await send_json(self._http, "GET", self.path, params=query)
        meta = body.get("meta")
        if meta is None or "page" in query:
            return list(body["data"])

        # Paginated collections are walked until every row is fetched.
        rows = list(body["data"])
        page = meta["page"]
        while len(rows) < meta["total"] and body["data"]:
            page += 1
            body = await send_json(
                self._http,
                "GET",
                self.path,
                params={**query, "page": page, "page_size": meta["page_size"]},
            )
            rows.extend(body["data"])
        return rows

    async def insert(self, payload: dict[str, Any]) -> dict[str, Any]:
        body = await send_json(self._http, "POST", self.path, json=payload)
        return body["data"]

    async def update(self, resource_id: str | int, patch: dict[str, Any]) -> dict[str, Any]:
        body = await send_json(
            self._http,
            self.update_method,
            f"{self.item_path}/{resource_id}",
            json=patch,
        )
        return body["data"]

    async def delete(self, resource_id: str | int) -> None:
        await send_json(self._http, "DELETE", f"{self.item_path}/{resource_id}")


class HelpdeskClient:
    """Bundles the gateways and the auth session over one shared ``httpx.AsyncClient``.

    Usage::

        async with HelpdeskClient() as client:
            await client.session.sign_in("agent@example.com", "secret-password")
            store = OptimisticTicketStore(client.tickets)
            await store.load()
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=base_url or f"{settings.api_base_url}{settings.api_prefix}",
            timeout=timeout if timeout is not None else settings.client_timeout_seconds,
        )

        self.session = AuthSession(self._http)
        self.tickets = HttpResourceGateway(self._http, "/tickets", update_method="PATCH")
        self.users = HttpResourceGateway(self._http, "/users", update_method="PATCH")
        self.priorities = HttpResourceGateway(self._http, "/priorities")
        self.categories = HttpResourceGateway(self._http, "/categories")
        self.assignees = HttpResourceGateway(self._http, "/assignees")
        self.departments = HttpResourceGateway(self._http, "/departments")
        self.roles = HttpResourceGateway(self._http, "/roles")

    def comments(self, ticket_id: str) -> HttpResourceGateway:
        return HttpResourceGateway(
            self._http,
            f"/tickets/{ticket_id}/comments",
            item_path="/comments",
        )

    def notes(self, ticket_id: str) -> HttpResourceGateway:
        return HttpResourceGateway(
            self._http,
            f"/tickets/{ticket_id}/notes",
            item_path="/notes",
        )

    async def dashboard_stats(self) -> dict[str, int]:
        body = await send_json(self._http, "GET", "/dashboard/stats")
        return body["data"]

    async def recent_tickets(self, limit: int = 5) -> list[dict[str, Any]]:
        body = await send_json(self._http, "GET", "/dashboard/recent", params={"limit": limit})
        return body["data"]

    async def department_counts(self) -> list[dict[str, Any]]:
        body = await send_json(self._http, "GET", "/dashboard/departments")
        return body["data"]

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "HelpdeskClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
