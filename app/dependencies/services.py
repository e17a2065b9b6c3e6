from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Request

from app.core.errors import ServiceUnavailableError
from app.records.service import RecordService
from app.records.store import RecordStore
from app.tickets.service import TicketService
from app.workflow.dispatcher import ActionDispatcher


def _from_state(request: Request, name: str, label: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise ServiceUnavailableError(f"{label} is not configured", details={"service": name})
    return value


async def get_record_store(request: Request) -> RecordStore:
    return _from_state(request, "record_store", "Record store")


async def get_ticket_service(request: Request) -> TicketService:
    return _from_state(request, "ticket_service", "Ticket service")


async def get_record_service(request: Request) -> RecordService:
    return _from_state(request, "record_service", "Record service")


async def get_action_dispatcher(request: Request) -> ActionDispatcher:
    return _from_state(request, "action_dispatcher", "Action dispatcher")


RecordStoreDep = Annotated[RecordStore, Depends(get_record_store)]
TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
RecordServiceDep = Annotated[RecordService, Depends(get_record_service)]
ActionDispatcherDep = Annotated[ActionDispatcher, Depends(get_action_dispatcher)]
