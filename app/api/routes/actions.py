"""Bound workflow actions on imputations, imputation periods and time logs."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.dependencies.services import ActionDispatcherDep
from app.records.entities import EntityType

router = APIRouter(tags=["actions"])


class ValidationActionRequest(BaseModel):
    validatedBy: str | None = Field(default=None, max_length=255)


class SendActionRequest(BaseModel):
    sentBy: str | None = Field(default=None, max_length=255)


def _input(payload: BaseModel | None) -> dict[str, Any]:
    return payload.model_dump(exclude_none=True) if payload is not None else {}


@router.post("/imputations/{record_id}/validate")
async def validate_imputation(
    record_id: str, dispatcher: ActionDispatcherDep, payload: ValidationActionRequest | None = None
) -> dict[str, Any]:
    return await dispatcher.dispatch("validate", EntityType.IMPUTATIONS, record_id, _input(payload))


@router.post("/imputations/{record_id}/reject")
async def reject_imputation(
    record_id: str, dispatcher: ActionDispatcherDep, payload: ValidationActionRequest | None = None
) -> dict[str, Any]:
    return await dispatcher.dispatch("reject", EntityType.IMPUTATIONS, record_id, _input(payload))


@router.post("/imputation-periods/{record_id}/submit")
async def submit_period(record_id: str, dispatcher: ActionDispatcherDep) -> dict[str, Any]:
    return await dispatcher.dispatch("submit", EntityType.IMPUTATION_PERIODS, record_id)


@router.post("/imputation-periods/{record_id}/validate")
async def validate_period(
    record_id: str, dispatcher: ActionDispatcherDep, payload: ValidationActionRequest | None = None
) -> dict[str, Any]:
    return await dispatcher.dispatch("validate", EntityType.IMPUTATION_PERIODS, record_id, _input(payload))


@router.post("/imputation-periods/{record_id}/reject")
async def reject_period(
    record_id: str, dispatcher: ActionDispatcherDep, payload: ValidationActionRequest | None = None
) -> dict[str, Any]:
    return await dispatcher.dispatch("reject", EntityType.IMPUTATION_PERIODS, record_id, _input(payload))


@router.post("/imputation-periods/{record_id}/send-to-stratime")
async def send_period(
    record_id: str, dispatcher: ActionDispatcherDep, payload: SendActionRequest | None = None
) -> dict[str, Any]:
    return await dispatcher.dispatch("sendToStraTIME", EntityType.IMPUTATION_PERIODS, record_id, _input(payload))


@router.post("/time-logs/{record_id}/send-to-stratime")
async def send_time_log(record_id: str, dispatcher: ActionDispatcherDep) -> dict[str, Any]:
    return await dispatcher.dispatch("sendToStraTIME", EntityType.TIME_LOGS, record_id)
