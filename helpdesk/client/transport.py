import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """A failed backend call, parsed from the API error envelope when there is one."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "BACKEND_ERROR",
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    @classmethod
    def from_response(cls, response: httpx.Response) -> "BackendError":
        try:
            body = response.json()
        except ValueError:
            body = None

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return cls(
                error.get("message") or response.reason_phrase,
                code=error.get("code") or "BACKEND_ERROR",
                status_code=response.status_code,
                details=error.get("details") or {},
            )
        return cls(
            response.text or response.reason_phrase,
            status_code=response.status_code,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, status_code={self.status_code!r})"


class AuthenticationError(BackendError):
    """Raised by the auth session; ``message`` is suitable for a login form."""


async def send_json(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,
) -> dict[str, Any]:
    """Send one request and return the decoded body, raising ``BackendError`` on failure."""
    try:
        response = await http.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        logger.warning("%s %s failed: %s", method, url, exc)
        raise BackendError(
            "Could not reach the helpdesk backend.",
            code="NETWORK_ERROR",
        ) from exc

    if response.is_error:
        raise BackendError.from_response(response)
    if response.status_code == httpx.codes.NO_CONTENT or not response.content:
        return {}
    return response.json()
