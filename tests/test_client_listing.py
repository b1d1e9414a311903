from datetime import UTC, datetime, timedelta

import pytest

from helpdesk.client.listing import SortState, TicketFilters, paginate, search_tickets, sort_tickets
from helpdesk.models.schemas.ticket import TicketRead
from tests.helpers.fakes import ticket_row

BASE = datetime(2026, 3, 1, tzinfo=UTC)


def make_ticket(ticket_id: str, **overrides) -> TicketRead:
    return TicketRead.model_validate(ticket_row(ticket_id, **overrides))


@pytest.fixture
def tickets() -> list[TicketRead]:
    return [
        make_ticket(
            "t-1",
            title="Login broken",
            description="SSO redirect loop",
            priority={"id": 3, "name": "HIGH"},
            category={"id": 1, "name": "BUG"},
            created_at=BASE,
        ),
        make_ticket(
            "t-2",
            title="Dark mode",
            status="IN_PROGRESS",
            priority={"id": 1, "name": "LOW"},
            category={"id": 2, "name": "FEATURE"},
            assignee={"id": 1, "name": "Zoe"},
            created_at=BASE + timedelta(hours=1),
        ),
        make_ticket(
            "t-3",
            title="Slow search",
            status="CLOSED",
            category={"id": 3, "name": "PERFORMANCE"},
            assignee={"id": 2, "name": "adam"},
            created_at=BASE + timedelta(hours=2),
        ),
    ]


def test_filters_or_within_group_and_across_groups(tickets: list[TicketRead]) -> None:
    filters = TicketFilters(statuses=frozenset({"open", "IN_PROGRESS"}), categories=frozenset({"bug"}))

    assert [ticket.id for ticket in filters.apply(tickets)] == ["t-1"]
    assert filters.active_count == 3


def test_empty_filters_match_everything(tickets: list[TicketRead]) -> None:
    filters = TicketFilters()

    assert filters.apply(tickets) == tickets
    assert filters.active_count == 0


def test_priority_filter_excludes_tickets_without_priority(tickets: list[TicketRead]) -> None:
    filters = TicketFilters(priorities=frozenset({"low", "high"}))

    assert [ticket.id for ticket in filters.apply(tickets)] == ["t-1", "t-2"]


def test_search_matches_title_or_description(tickets: list[TicketRead]) -> None:
    assert [ticket.id for ticket in search_tickets(tickets, "  sso ")] == ["t-1"]
    assert [ticket.id for ticket in search_tickets(tickets, "SEARCH")] == ["t-3"]
    assert search_tickets(tickets, "") == tickets


def test_sort_toggle_flips_direction_on_same_field() -> None:
    state = SortState()

    by_title = state.toggle("title")
    assert by_title == SortState("title", "asc")
    assert by_title.toggle("title") == SortState("title", "desc")


def test_sort_by_assignee_is_case_insensitive_with_missing_first(tickets: list[TicketRead]) -> None:
    ordered = sort_tickets(tickets, SortState("assignee", "asc"))

    assert [ticket.id for ticket in ordered] == ["t-1", "t-3", "t-2"]


def test_default_sort_is_newest_first(tickets: list[TicketRead]) -> None:
    assert [ticket.id for ticket in sort_tickets(tickets, SortState())] == ["t-3", "t-2", "t-1"]


def test_paginate_clamps_out_of_range_pages() -> None:
    items = list(range(45))

    last = paginate(items, 9, 20)
    assert last.page == 3
    assert last.items == list(range(40, 45))
    assert last.total_pages == 3

    assert paginate(items, 0, 20).page == 1


@pytest.mark.parametrize("total", [40, 45, 60])
def test_paginate_second_page_starts_after_first_page(total: int) -> None:
    page = paginate(range(total), 2, 20)

    assert page.page == 2
    assert page.items == list(range(20, 40))
    assert page.total == total


def test_paginate_empty_collection_has_one_page() -> None:
    page = paginate([], 1, 10)

    assert page.items == []
    assert page.total_pages == 1


def test_paginate_rejects_non_positive_page_size() -> None:
    with pytest.raises(ValueError):
        paginate([1, 2], 1, 0)
