from __future__ import annotations

import json
from unittest.mock import AsyncMock

import asyncpg
import pytest

from app.core.errors import DuplicateRecordError
from app.records.entities import EntityType
from app.records.store import FieldFilter, InMemoryRecordStore, PostgresRecordStore
from tests.helpers import DummyPool


@pytest.mark.asyncio
async def test_memory_insert_assigns_identifier(store):
    record = await store.insert(EntityType.TIME_LOGS, {"duration": 1})

    assert record["ID"]
    assert await store.get(EntityType.TIME_LOGS, record["ID"]) == record


@pytest.mark.asyncio
async def test_memory_insert_refuses_duplicate_identifier(store):
    await store.insert(EntityType.USERS, {"ID": "u-1"})

    with pytest.raises(DuplicateRecordError) as excinfo:
        await store.insert(EntityType.USERS, {"ID": "u-1"})

    assert excinfo.value.http_status == 409
    assert excinfo.value.details == {"entity": "Users", "id": "u-1"}


@pytest.mark.asyncio
async def test_memory_returns_copies(store):
    record = await store.insert(EntityType.TICKETS, {"ID": "t-1", "meta": {"a": 1}})
    record["meta"]["a"] = 2

    fetched = await store.get(EntityType.TICKETS, "t-1")
    fetched["meta"]["a"] = 3

    assert (await store.get(EntityType.TICKETS, "t-1"))["meta"] == {"a": 1}


@pytest.mark.asyncio
async def test_memory_find_applies_all_filters(store):
    await store.insert(EntityType.TICKETS, {"ticketCode": "TK-2026-0001", "projectId": "p-1"})
    await store.insert(EntityType.TICKETS, {"ticketCode": "TK-2026-0002", "projectId": "p-2"})
    await store.insert(EntityType.TICKETS, {"ticketCode": "TK-2025-0001", "projectId": "p-1"})
    await store.insert(EntityType.TICKETS, {"projectId": "p-1"})

    this_year = await store.find(EntityType.TICKETS, [FieldFilter("ticketCode", "TK-2026-", op="prefix")])
    both = await store.find(
        EntityType.TICKETS,
        [FieldFilter("ticketCode", "TK-2026-", op="prefix"), FieldFilter("projectId", "p-1")],
    )

    assert len(this_year) == 2
    assert [record["ticketCode"] for record in both] == ["TK-2026-0001"]
    assert len(await store.find(EntityType.TICKETS)) == 4


@pytest.mark.asyncio
async def test_memory_update_merges_fields_and_ignores_missing(store):
    await store.insert(EntityType.IMPUTATIONS, {"ID": "i-1", "hours": 2, "validationStatus": "DRAFT"})

    await store.update_fields(EntityType.IMPUTATIONS, "i-1", {"validationStatus": "SUBMITTED"})
    await store.update_fields(EntityType.IMPUTATIONS, "missing", {"validationStatus": "SUBMITTED"})

    assert await store.get(EntityType.IMPUTATIONS, "i-1") == {"ID": "i-1", "hours": 2, "validationStatus": "SUBMITTED"}
    assert await store.get(EntityType.IMPUTATIONS, "missing") is None


@pytest.mark.asyncio
async def test_entity_sets_are_isolated():
    store = InMemoryRecordStore()
    await store.insert(EntityType.USERS, {"ID": "x"})

    assert await store.get(EntityType.PROJECTS, "x") is None


@pytest.mark.asyncio
async def test_postgres_ensure_schema_creates_records_table():
    connection = AsyncMock()
    repository = PostgresRecordStore(DummyPool(connection))

    await repository.ensure_schema()

    statement = connection.execute.await_args.args[0]
    assert "CREATE TABLE IF NOT EXISTS records" in statement


@pytest.mark.asyncio
async def test_postgres_get_parses_json_documents():
    connection = AsyncMock()
    connection.fetchrow = AsyncMock(return_value={"data": json.dumps({"ID": "i-1", "hours": 3})})
    repository = PostgresRecordStore(DummyPool(connection))

    record = await repository.get(EntityType.IMPUTATIONS, "i-1")

    assert record == {"ID": "i-1", "hours": 3}
    assert connection.fetchrow.await_args.args[1:] == ("Imputations", "i-1")


@pytest.mark.asyncio
async def test_postgres_get_missing_returns_none():
    connection = AsyncMock()
    connection.fetchrow = AsyncMock(return_value=None)
    repository = PostgresRecordStore(DummyPool(connection))

    assert await repository.get(EntityType.USERS, "nope") is None


@pytest.mark.asyncio
async def test_postgres_insert_assigns_identifier_and_serialises():
    connection = AsyncMock()
    connection.fetchrow = AsyncMock(side_effect=lambda sql, entity, record_id, data: {"data": data})
    repository = PostgresRecordStore(DummyPool(connection))

    record = await repository.insert(EntityType.TIME_LOGS, {"duration": 1})

    _, entity, record_id, data = connection.fetchrow.await_args.args
    assert entity == "TimeLogs"
    assert record_id == record["ID"]
    assert json.loads(data) == {"duration": 1, "ID": record_id}


@pytest.mark.asyncio
async def test_postgres_insert_maps_unique_violation_to_conflict():
    connection = AsyncMock()
    connection.fetchrow = AsyncMock(side_effect=asyncpg.UniqueViolationError("duplicate key"))
    repository = PostgresRecordStore(DummyPool(connection))

    with pytest.raises(DuplicateRecordError) as excinfo:
        await repository.insert(EntityType.USERS, {"ID": "u-1"})

    assert excinfo.value.record_id == "u-1"


@pytest.mark.asyncio
async def test_postgres_update_merges_json_patch():
    connection = AsyncMock()
    repository = PostgresRecordStore(DummyPool(connection))

    await repository.update_fields(EntityType.TIME_LOGS, "tl-1", {"sentToStraTIME": True})

    sql, entity, record_id, patch = connection.execute.await_args.args
    assert "data || $3::jsonb" in sql
    assert (entity, record_id) == ("TimeLogs", "tl-1")
    assert json.loads(patch) == {"sentToStraTIME": True}


@pytest.mark.asyncio
async def test_postgres_find_builds_filtered_query():
    connection = AsyncMock()
    connection.fetch = AsyncMock(return_value=[{"data": {"ID": "t-1"}}])
    repository = PostgresRecordStore(DummyPool(connection))

    rows = await repository.find(
        EntityType.TICKETS,
        [FieldFilter("ticketCode", "TK-2026_", op="prefix"), FieldFilter("active", True)],
    )

    sql, *args = connection.fetch.await_args.args
    assert rows == [{"ID": "t-1"}]
    assert "data->>$2 LIKE $3" in sql
    assert "data @> $4::jsonb" in sql
    assert sql.endswith("ORDER BY created_at ASC")
    assert args == ["Tickets", "ticketCode", "TK-2026\\_%", json.dumps({"active": True})]
