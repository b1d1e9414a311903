import inspect
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

TICKET_CREATED = "ticket-created"

EventHandler = Callable[[Any], Awaitable[None] | None]


class EventBus:
    """In-process publish/subscribe for UI-level signals. Nothing is queued or persisted."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, name: str, handler: EventHandler) -> Callable[[], None]:
        self._handlers[name].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(name, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    async def emit(self, name: str, payload: Any = None) -> None:
        for handler in list(self._handlers.get(name, ())):
            result = handler(payload)
            if inspect.isawaitable(result):
                await result
