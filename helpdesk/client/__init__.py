"""Async client core: backend gateways, optimistic ticket state and list helpers."""

from helpdesk.client.board import KanbanBoard
from helpdesk.client.composer import TicketComposer
from helpdesk.client.events import TICKET_CREATED, EventBus
from helpdesk.client.gateway import HelpdeskClient, HttpResourceGateway, ResourceGateway
from helpdesk.client.listing import Page, SortState, TicketFilters, paginate, search_tickets, sort_tickets
from helpdesk.client.preferences import AppState, PreferenceStorage
from helpdesk.client.session import AuthSession
from helpdesk.client.store import OptimisticTicketStore
from helpdesk.client.transport import AuthenticationError, BackendError

__all__ = [
    "AppState",
    "AuthSession",
    "AuthenticationError",
    "BackendError",
    "EventBus",
    "HelpdeskClient",
    "HttpResourceGateway",
    "KanbanBoard",
    "OptimisticTicketStore",
    "Page",
    "PreferenceStorage",
    "ResourceGateway",
    "SortState",
    "TICKET_CREATED",
    "TicketComposer",
    "TicketFilters",
    "paginate",
    "search_tickets",
    "sort_tickets",
]
