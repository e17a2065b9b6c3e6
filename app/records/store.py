from __future__ import annotations

import asyncio
import copy
import json
import uuid
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Protocol, Sequence

import asyncpg

from app.core.errors import DuplicateRecordError

from .entities import EntityType

ID_FIELD = "ID"


@dataclass(frozen=True, slots=True)
class FieldFilter:
    """Single condition of a filtered scan. Filters passed together are AND-ed."""

    field: str
    value: Any
    op: Literal["eq", "prefix"] = "eq"

    def matches(self, record: Mapping[str, Any]) -> bool:
        current = record.get(self.field)
        if self.op == "prefix":
            return isinstance(current, str) and current.startswith(str(self.value))
        return current == self.value


class RecordStore(Protocol):
    """Point lookup, filtered scan, insert and update-by-id over entity sets."""

    async def get(self, entity_type: EntityType, record_id: str) -> dict[str, Any] | None:
        ...

    async def find(
        self, entity_type: EntityType, filters: Sequence[FieldFilter] = ()
    ) -> list[dict[str, Any]]:
        ...

    async def insert(self, entity_type: EntityType, record: Mapping[str, Any]) -> dict[str, Any]:
        ...

    async def update_fields(
        self, entity_type: EntityType, record_id: str, changes: Mapping[str, Any]
    ) -> None:
        ...


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryRecordStore:
    """Process-local store used for development and tests.

    Every call suspends once before touching state, so concurrent requests
    interleave between calls the same way they do against a networked store.
    """

    def __init__(self) -> None:
        self._tables: dict[EntityType, dict[str, dict[str, Any]]] = {}

    def _table(self, entity_type: EntityType) -> dict[str, dict[str, Any]]:
        return self._tables.setdefault(EntityType(entity_type), {})

    async def get(self, entity_type: EntityType, record_id: str) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        record = self._table(entity_type).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def find(
        self, entity_type: EntityType, filters: Sequence[FieldFilter] = ()
    ) -> list[dict[str, Any]]:
        await asyncio.sleep(0)
        return [
            copy.deepcopy(record)
            for record in self._table(entity_type).values()
            if all(condition.matches(record) for condition in filters)
        ]

    async def insert(self, entity_type: EntityType, record: Mapping[str, Any]) -> dict[str, Any]:
        await asyncio.sleep(0)
        stored = copy.deepcopy(dict(record))
        stored.setdefault(ID_FIELD, _new_id())
        table = self._table(entity_type)
        if stored[ID_FIELD] in table:
            raise DuplicateRecordError(EntityType(entity_type).value, str(stored[ID_FIELD]))
        table[stored[ID_FIELD]] = stored
        return copy.deepcopy(stored)

    async def update_fields(
        self, entity_type: EntityType, record_id: str, changes: Mapping[str, Any]
    ) -> None:
        await asyncio.sleep(0)
        record = self._table(entity_type).get(record_id)
        if record is not None:
            record.update(copy.deepcopy(dict(changes)))


class PostgresRecordStore:
    """Record store keeping each entity record as a JSONB document."""

    _CREATE_RECORDS_SQL = """
    CREATE TABLE IF NOT EXISTS records (
        entity_type TEXT NOT NULL,
        id TEXT NOT NULL,
        data JSONB NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        PRIMARY KEY (entity_type, id)
    )
    """

    _SELECT_RECORD_SQL = """
    SELECT data FROM records WHERE entity_type = $1 AND id = $2
    """

    _SELECT_RECORDS_SQL = """
    SELECT data FROM records WHERE entity_type = $1
    """

    _INSERT_RECORD_SQL = """
    INSERT INTO records (entity_type, id, data)
    VALUES ($1, $2, $3::jsonb)
    RETURNING data
    """

    _UPDATE_FIELDS_SQL = """
    UPDATE records SET data = data || $3::jsonb
    WHERE entity_type = $1 AND id = $2
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def ensure_schema(self) -> None:
        async with self._pool.acquire() as connection:
            await connection.execute(self._CREATE_RECORDS_SQL)

    async def get(self, entity_type: EntityType, record_id: str) -> dict[str, Any] | None:
        async with self._pool.acquire() as connection:
            row = await connection.fetchrow(self._SELECT_RECORD_SQL, EntityType(entity_type).value, record_id)
        if row is None:
            return None
        return _load_data(row["data"])

    async def find(
        self, entity_type: EntityType, filters: Sequence[FieldFilter] = ()
    ) -> list[dict[str, Any]]:
        sql, args = self._build_find(EntityType(entity_type), filters)
        async with self._pool.acquire() as connection:
            rows = await connection.fetch(sql, *args)
        return [_load_data(row["data"]) for row in rows]

    async def insert(self, entity_type: EntityType, record: Mapping[str, Any]) -> dict[str, Any]:
        stored = dict(record)
        stored.setdefault(ID_FIELD, _new_id())
        entity = EntityType(entity_type)
        async with self._pool.acquire() as connection:
            try:
                row = await connection.fetchrow(
                    self._INSERT_RECORD_SQL,
                    entity.value,
                    str(stored[ID_FIELD]),
                    json.dumps(stored),
                )
            except asyncpg.UniqueViolationError as exc:
                raise DuplicateRecordError(entity.value, str(stored[ID_FIELD])) from exc
        if row is None:
            raise RuntimeError("Failed to insert record")
        return _load_data(row["data"])

    async def update_fields(
        self, entity_type: EntityType, record_id: str, changes: Mapping[str, Any]
    ) -> None:
        async with self._pool.acquire() as connection:
            await connection.execute(
                self._UPDATE_FIELDS_SQL,
                EntityType(entity_type).value,
                record_id,
                json.dumps(dict(changes)),
            )

    def _build_find(
        self, entity_type: EntityType, filters: Sequence[FieldFilter]
    ) -> tuple[str, list[Any]]:
        sql = self._SELECT_RECORDS_SQL.strip()
        args: list[Any] = [entity_type.value]
        for condition in filters:
            if condition.op == "prefix":
                args.append(condition.field)
                args.append(_escape_like(str(condition.value)) + "%")
                sql += f" AND data->>${len(args) - 1} LIKE ${len(args)}"
            else:
                args.append(json.dumps({condition.field: condition.value}))
                sql += f" AND data @> ${len(args)}::jsonb"
        return sql + " ORDER BY created_at ASC", args


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _load_data(value: Any) -> dict[str, Any]:
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)
