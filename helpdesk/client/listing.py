"""Pure helpers behind the ticket list view: filtering, search, sorting and paging."""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from helpdesk.models.schemas.ticket import TicketRead

T = TypeVar("T")

SortField = Literal["id", "title", "status", "priority", "assignee", "created_at"]
SortDirection = Literal["asc", "desc"]


def _folded(values: Iterable[str]) -> frozenset[str]:
    return frozenset(value.strip().casefold() for value in values if value and value.strip())


@dataclass(frozen=True, slots=True)
class TicketFilters:
    """OR within each group, AND across groups. An empty group does not constrain."""

    statuses: frozenset[str] = field(default_factory=frozenset)
    categories: frozenset[str] = field(default_factory=frozenset)
    priorities: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "statuses", _folded(self.statuses))
        object.__setattr__(self, "categories", _folded(self.categories))
        object.__setattr__(self, "priorities", _folded(self.priorities))

    @property
    def active_count(self) -> int:
        return len(self.statuses) + len(self.categories) + len(self.priorities)

    def matches(self, ticket: TicketRead) -> bool:
        if self.statuses and ticket.status.casefold() not in self.statuses:
            return False
        if self.categories and _name(ticket.category).casefold() not in self.categories:
            return False
        if self.priorities and _name(ticket.priority).casefold() not in self.priorities:
            return False
        return True

    def apply(self, tickets: Iterable[TicketRead]) -> list[TicketRead]:
        return [ticket for ticket in tickets if self.matches(ticket)]


def search_tickets(tickets: Iterable[TicketRead], term: str | None) -> list[TicketRead]:
    needle = (term or "").strip().casefold()
    if not needle:
        return list(tickets)
    return [
        ticket
        for ticket in tickets
        if needle in ticket.title.casefold() or needle in (ticket.description or "").casefold()
    ]


@dataclass(frozen=True, slots=True)
class SortState:
    field: SortField = "created_at"
    direction: SortDirection = "desc"

    def toggle(self, field: SortField) -> "SortState":
        if field == self.field:
            return SortState(field, "desc" if self.direction == "asc" else "asc")
        return SortState(field, "asc")


def _name(reference: Any) -> str:
    return reference.name if reference is not None else ""


def _sort_key(ticket: TicketRead, sort_field: SortField) -> str | datetime:
    if sort_field == "created_at":
        return ticket.created_at
    if sort_field == "priority":
        return _name(ticket.priority).casefold()
    if sort_field == "assignee":
        return _name(ticket.assignee).casefold()
    value = getattr(ticket, sort_field)
    return (value or "").casefold()


def sort_tickets(tickets: Iterable[TicketRead], state: SortState) -> list[TicketRead]:
    return sorted(
        tickets,
        key=lambda ticket: _sort_key(ticket, state.field),
        reverse=state.direction == "desc",
    )


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total: int
    total_pages: int


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    """Return page ``page`` (1-based). Out-of-range pages clamp into ``[1, total_pages]``."""
    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    current = min(max(page, 1), total_pages)
    start = (current - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        page=current,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
    )
