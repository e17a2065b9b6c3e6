from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, ConfigDict

from app.dependencies.services import TicketServiceDep
from app.records.store import FieldFilter

router = APIRouter(prefix="/tickets", tags=["tickets"])


class TicketPayload(BaseModel):
    """Ticket fields; attributes not listed here are stored as given."""

    model_config = ConfigDict(extra="allow")

    projectId: str | None = None
    title: str | None = None
    nature: str | None = None
    status: str | None = None
    effortHours: float | None = None
    estimationHours: float | None = None
    history: list[Any] | str | None = None
    tags: list[Any] | str | None = None
    documentationObjectIds: list[Any] | str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_ticket(payload: TicketPayload, service: TicketServiceDep) -> dict[str, Any]:
    return await service.create_ticket(payload.changes())


@router.get("")
async def list_tickets(
    service: TicketServiceDep,
    project_id: str | None = Query(default=None, alias="projectId"),
    status_filter: str | None = Query(default=None, alias="status"),
) -> list[dict[str, Any]]:
    filters = []
    if project_id is not None:
        filters.append(FieldFilter("projectId", project_id))
    if status_filter is not None:
        filters.append(FieldFilter("status", status_filter))
    return await service.list_tickets(filters)


@router.get("/{ticket_id}")
async def get_ticket(ticket_id: str, service: TicketServiceDep) -> dict[str, Any]:
    return await service.get_ticket(ticket_id)


@router.patch("/{ticket_id}")
async def update_ticket(ticket_id: str, payload: TicketPayload, service: TicketServiceDep) -> dict[str, Any]:
    return await service.update_ticket(ticket_id, payload.changes())
