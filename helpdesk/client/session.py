import logging
from collections.abc import Callable

import httpx

from helpdesk.client.transport import AuthenticationError, BackendError, send_json
from helpdesk.models.schemas.auth import SessionRead
from helpdesk.models.schemas.user import UserRead

logger = logging.getLogger(__name__)

SessionListener = Callable[[UserRead | None], None]


class AuthSession:
    """Signed-in state for one ``httpx.AsyncClient``.

    A successful sign-in stores the bearer token on the shared client so every
    gateway built on it is authenticated. Listeners are called with the user on
    sign-in and with ``None`` on sign-out.
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http
        self._user: UserRead | None = None
        self._listeners: list[SessionListener] = []

    @property
    def current_user(self) -> UserRead | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, email: str, password: str) -> UserRead:
        session = await self._open("/auth/login", {"email": email, "password": password})
        logger.info("Signed in as %s", session.user.email)
        return session.user

    async def sign_up(
        self,
        email: str,
        password: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> UserRead:
        session = await self._open(
            "/auth/signup",
            {
                "email": email,
                "password": password,
                "first_name": first_name,
                "last_name": last_name,
            },
        )
        logger.info("Registered %s", session.user.email)
        return session.user

    async def sign_out(self) -> None:
        if self._user is None:
            return
        try:
            await send_json(self._http, "POST", "/auth/logout")
        except BackendError as exc:
            logger.warning("Logout request failed, clearing local session anyway: %s", exc)
        finally:
            self._http.headers.pop("Authorization", None)
            self._set_user(None)

    async def refresh(self) -> UserRead | None:
        """Re-read the current user from ``/auth/me``; an expired token ends the session."""
        if "Authorization" not in self._http.headers:
            return None
        try:
            body = await send_json(self._http, "GET", "/auth/me")
        except BackendError as exc:
            if exc.status_code != httpx.codes.UNAUTHORIZED:
                raise
            self._http.headers.pop("Authorization", None)
            self._set_user(None)
            return None
        user = UserRead.model_validate(body["data"])
        self._set_user(user)
        return user

    async def _open(self, url: str, payload: dict[str, str | None]) -> SessionRead:
        try:
            body = await send_json(self._http, "POST", url, json=payload)
        except BackendError as exc:
            raise AuthenticationError(
                exc.message,
                code=exc.code,
                status_code=exc.status_code,
                details=exc.details,
            ) from exc

        session = SessionRead.model_validate(body["data"])
        self._http.headers["Authorization"] = f"{session.token_type.capitalize()} {session.access_token}"
        self._set_user(session.user)
        return session

    def _set_user(self, user: UserRead | None) -> None:
        self._user = user
        for listener in list(self._listeners):
            listener(user)
