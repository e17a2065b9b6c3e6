from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from app.core.errors import RecordNotFoundError, ValidationError
from app.core.time import now_iso, utcnow
from app.records.codec import StructuredFieldCodec
from app.records.entities import EntityType
from app.records.store import ID_FIELD, FieldFilter, RecordStore

from .codes import TicketCodeGenerator, year_prefix

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = ("projectId", "title", "nature")
INITIAL_STATUS = "NEW"
CODE_FIELD = "ticketCode"


@dataclass(slots=True)
class TicketService:
    """Create, update and read tickets, layering ticket rules over the record store."""

    store: RecordStore
    codec: StructuredFieldCodec = field(default_factory=StructuredFieldCodec)
    code_generator: TicketCodeGenerator = field(default_factory=TicketCodeGenerator)
    clock: Callable[[], str] = now_iso

    async def create_ticket(self, data: Mapping[str, Any]) -> dict[str, Any]:
        for name in REQUIRED_FIELDS:
            if not data.get(name):
                raise ValidationError(f"{name} is required", details={"field": name})

        record = dict(data)
        year = utcnow().year
        issued = await self.store.find(EntityType.TICKETS, [FieldFilter(CODE_FIELD, year_prefix(year), op="prefix")])
        record[CODE_FIELD] = self.code_generator.generate(year, len(issued))

        now = self.clock()
        record["status"] = record.get("status") or INITIAL_STATUS
        if record.get("effortHours") is None:
            record["effortHours"] = 0
        if record.get("estimationHours") is None:
            record["estimationHours"] = 0
        record["createdAt"] = record.get("createdAt") or now
        record["updatedAt"] = now

        stored = await self.store.insert(EntityType.TICKETS, self.codec.encode_for_create(EntityType.TICKETS, record))
        logger.info("Created ticket %s (%s)", stored.get(ID_FIELD), stored.get(CODE_FIELD))
        return self.codec.decode_record(EntityType.TICKETS, stored)

    async def update_ticket(self, ticket_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        current = await self.store.get(EntityType.TICKETS, ticket_id)
        if current is None:
            raise RecordNotFoundError(EntityType.TICKETS.value, ticket_id)

        # ticketCode and the identifier are fixed at creation.
        update = {key: value for key, value in changes.items() if key not in (CODE_FIELD, ID_FIELD)}
        update["updatedAt"] = self.clock()
        await self.store.update_fields(
            EntityType.TICKETS, ticket_id, self.codec.encode_for_update(EntityType.TICKETS, update)
        )
        return await self.get_ticket(ticket_id)

    async def get_ticket(self, ticket_id: str) -> dict[str, Any]:
        record = await self.store.get(EntityType.TICKETS, ticket_id)
        if record is None:
            raise RecordNotFoundError(EntityType.TICKETS.value, ticket_id)
        return self.codec.decode_record(EntityType.TICKETS, record)

    async def list_tickets(self, filters: Sequence[FieldFilter] = ()) -> list[dict[str, Any]]:
        records = await self.store.find(EntityType.TICKETS, filters)
        return self.codec.decode_records(EntityType.TICKETS, records)
