from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, status

from app.dependencies.services import RecordServiceDep
from app.records.entities import EntityType

router = APIRouter(prefix="/records", tags=["records"])


@router.post("/{entity_type}", status_code=status.HTTP_201_CREATED)
async def create_record(
    entity_type: EntityType,
    service: RecordServiceDep,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    return await service.create(entity_type, payload)


@router.get("/{entity_type}")
async def list_records(entity_type: EntityType, service: RecordServiceDep) -> list[dict[str, Any]]:
    return await service.list(entity_type)


@router.get("/{entity_type}/{record_id}")
async def get_record(entity_type: EntityType, record_id: str, service: RecordServiceDep) -> dict[str, Any]:
    return await service.get(entity_type, record_id)


@router.patch("/{entity_type}/{record_id}")
async def update_record(
    entity_type: EntityType,
    record_id: str,
    service: RecordServiceDep,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    return await service.update(entity_type, record_id, payload)
