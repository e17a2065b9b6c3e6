from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from app.core.errors import RecordNotFoundError, ValidationError
from app.core.time import now_iso

from .codec import StructuredFieldCodec
from .entities import EntityType, schema_for
from .store import ID_FIELD, FieldFilter, RecordStore


@dataclass(slots=True)
class RecordService:
    """Plain create/read/update for entity sets without workflow semantics.

    Tickets have their own service and are refused here.
    """

    store: RecordStore
    codec: StructuredFieldCodec = field(default_factory=StructuredFieldCodec)
    clock: Callable[[], str] = now_iso

    async def create(self, entity_type: EntityType, data: Mapping[str, Any]) -> dict[str, Any]:
        schema = schema_for(self._plain(entity_type))
        record = {**schema.create_defaults, **dict(data)}
        if schema.stamp_created_at and not record.get("createdAt"):
            record["createdAt"] = self.clock()
        stored = await self.store.insert(schema.entity_type, self.codec.encode_for_create(schema.entity_type, record))
        return self.codec.decode_record(schema.entity_type, stored)

    async def get(self, entity_type: EntityType, record_id: str) -> dict[str, Any]:
        entity = self._plain(entity_type)
        record = await self.store.get(entity, record_id)
        if record is None:
            raise RecordNotFoundError(entity.value, record_id)
        return self.codec.decode_record(entity, record)

    async def list(self, entity_type: EntityType, filters: Sequence[FieldFilter] = ()) -> list[dict[str, Any]]:
        entity = self._plain(entity_type)
        return self.codec.decode_records(entity, await self.store.find(entity, filters))

    async def update(self, entity_type: EntityType, record_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        entity = self._plain(entity_type)
        if await self.store.get(entity, record_id) is None:
            raise RecordNotFoundError(entity.value, record_id)
        update = {key: value for key, value in changes.items() if key != ID_FIELD}
        if update:
            await self.store.update_fields(entity, record_id, self.codec.encode_for_update(entity, update))
        return await self.get(entity, record_id)

    @staticmethod
    def _plain(entity_type: EntityType | str) -> EntityType:
        entity = EntityType(entity_type)
        if entity is EntityType.TICKETS:
            raise ValidationError("Tickets are managed through the ticket service")
        return entity
