"""Lookup-table routes. Every kind shares the same four operations."""

from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from helpdesk.models.schemas.reference import (
    ReferenceDataResponse,
    ReferenceKind,
    ReferenceListResponse,
    ReferenceWriteRequest,
)
from helpdesk.repositories.reference_repository import ReferenceRepository
from helpdesk.services.reference_service import ReferenceService

REFERENCE_PREFIXES: dict[ReferenceKind, str] = {
    "priority": "/priorities",
    "category": "/categories",
    "assignee": "/assignees",
    "department": "/departments",
    "role": "/roles",
}


def reference_service_factory(kind: ReferenceKind) -> Callable[[], ReferenceService]:
    def get_reference_service() -> ReferenceService:
        return ReferenceService(repository=ReferenceRepository(kind))

    get_reference_service.__name__ = f"get_{kind}_service"
    return get_reference_service


reference_services: dict[ReferenceKind, Callable[[], ReferenceService]] = {
    kind: reference_service_factory(kind) for kind in REFERENCE_PREFIXES
}


def build_reference_router(kind: ReferenceKind) -> APIRouter:
    router = APIRouter(prefix=REFERENCE_PREFIXES[kind])
    ServiceDep = Annotated[ReferenceService, Depends(reference_services[kind])]

    @router.get("", response_model=ReferenceListResponse)
    def list_entities(service: ServiceDep) -> ReferenceListResponse:
        return ReferenceListResponse(data=service.list_entities())

    @router.post("", response_model=ReferenceDataResponse, status_code=status.HTTP_201_CREATED)
    def create_entity(
        payload: ReferenceWriteRequest,
        service: ServiceDep,
    ) -> ReferenceDataResponse:
        return ReferenceDataResponse(data=service.create_entity(payload))

    @router.put("/{entity_id}", response_model=ReferenceDataResponse)
    def update_entity(
        entity_id: int,
        payload: ReferenceWriteRequest,
        service: ServiceDep,
    ) -> ReferenceDataResponse:
        return ReferenceDataResponse(data=service.update_entity(entity_id, payload))

    @router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_entity(entity_id: int, service: ServiceDep) -> Response:
        service.delete_entity(entity_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
