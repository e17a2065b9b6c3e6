"""Transition-guarded bound actions on workflow records."""

from __future__ import annotations

import asyncio
import logging
import weakref
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from opentelemetry import trace

from app.core.errors import InvalidTransitionError, RecordNotFoundError, UnknownActionError, ValidationError
from app.core.time import now_iso
from app.records.codec import StructuredFieldCodec
from app.records.entities import EntityType
from app.records.store import RecordStore

from .state import TransitionTable, ValidationStatus

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

ChangeBuilder = Callable[[Mapping[str, Any], str], dict[str, Any]]


@dataclass(frozen=True, slots=True)
class BoundAction:
    """An action addressed at one existing record.

    ``build_changes`` receives the caller input and the timestamp captured when
    the guard was checked, and returns the fields to write.
    """

    entity_type: EntityType
    name: str
    build_changes: ChangeBuilder
    actor_field: str | None = None
    actor_required: bool = False


def _validation_changes(status_field: str, target: ValidationStatus) -> ChangeBuilder:
    def build(payload: Mapping[str, Any], now: str) -> dict[str, Any]:
        return {
            status_field: target.value,
            "validatedBy": payload.get("validatedBy") or None,
            "validatedAt": now,
        }

    return build


def default_actions() -> list[BoundAction]:
    """Bound actions exposed for imputations, imputation periods and time logs."""

    return [
        BoundAction(
            EntityType.IMPUTATIONS,
            "validate",
            _validation_changes("validationStatus", ValidationStatus.VALIDATED),
            actor_field="validatedBy",
        ),
        BoundAction(
            EntityType.IMPUTATIONS,
            "reject",
            _validation_changes("validationStatus", ValidationStatus.REJECTED),
            actor_field="validatedBy",
        ),
        BoundAction(
            EntityType.IMPUTATION_PERIODS,
            "submit",
            lambda payload, now: {"status": ValidationStatus.SUBMITTED.value, "submittedAt": now},
        ),
        BoundAction(
            EntityType.IMPUTATION_PERIODS,
            "validate",
            _validation_changes("status", ValidationStatus.VALIDATED),
            actor_field="validatedBy",
            actor_required=True,
        ),
        BoundAction(
            EntityType.IMPUTATION_PERIODS,
            "reject",
            _validation_changes("status", ValidationStatus.REJECTED),
            actor_field="validatedBy",
            actor_required=True,
        ),
        # Not guarded: sending again re-sets the flag and overwrites sentAt.
        BoundAction(
            EntityType.IMPUTATION_PERIODS,
            "sendToStraTIME",
            lambda payload, now: {"sentToStraTIME": True, "sentBy": payload.get("sentBy"), "sentAt": now},
            actor_field="sentBy",
            actor_required=True,
        ),
        BoundAction(
            EntityType.TIME_LOGS,
            "sendToStraTIME",
            lambda payload, now: {"sentToStraTIME": True, "sentAt": now},
        ),
    ]


class ActionDispatcher:
    """Fetch a record, check the transition guard, write the changes and re-read.

    The read, the check and the write are separate store calls. Two concurrent
    dispatches on the same record can both pass the guard and the last write
    wins. With ``serialize_per_record`` enabled, dispatches on the same record
    are queued behind an in-process lock; this does not coordinate several
    worker processes.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        actions: Iterable[BoundAction] | None = None,
        transitions: TransitionTable | None = None,
        codec: StructuredFieldCodec | None = None,
        serialize_per_record: bool = False,
        clock: Callable[[], str] = now_iso,
    ) -> None:
        self._store = store
        self._transitions = transitions or TransitionTable()
        self._codec = codec or StructuredFieldCodec()
        self._clock = clock
        self._serialize = serialize_per_record
        self._locks: weakref.WeakValueDictionary[tuple[EntityType, str], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._actions: dict[tuple[EntityType, str], BoundAction] = {}
        for action in actions if actions is not None else default_actions():
            self.register(action)

    def register(self, action: BoundAction) -> None:
        self._actions[(action.entity_type, action.name)] = action

    async def dispatch(
        self,
        action_name: str,
        entity_type: EntityType | str,
        record_id: str | None,
        actor_input: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        entity = EntityType(entity_type)
        if not record_id or not str(record_id).strip():
            raise ValidationError(f"Missing {entity.value} ID")

        action = self._actions.get((entity, action_name))
        if action is None:
            raise UnknownActionError(f"Action '{action_name}' is not available on {entity.value}")

        payload = dict(actor_input or {})
        if action.actor_required and action.actor_field and not payload.get(action.actor_field):
            raise ValidationError(
                f"{action.actor_field} is required to {action_name} {entity.value}",
                details={"field": action.actor_field},
            )

        with tracer.start_as_current_span("workflow.dispatch") as span:
            span.set_attribute("workflow.entity", entity.value)
            span.set_attribute("workflow.action", action_name)
            span.set_attribute("workflow.record_id", str(record_id))
            async with AsyncExitStack() as stack:
                if self._serialize:
                    await stack.enter_async_context(self._lock_for(entity, record_id))
                return await self._apply(action, entity, record_id, payload)

    def _lock_for(self, entity: EntityType, record_id: str) -> asyncio.Lock:
        key = (entity, record_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def _apply(
        self,
        action: BoundAction,
        entity: EntityType,
        record_id: str,
        payload: Mapping[str, Any],
    ) -> dict[str, Any]:
        current = await self._store.get(entity, record_id)
        if current is None:
            raise RecordNotFoundError(entity.value, record_id)

        rule = self._transitions.rule_for(entity, action.name)
        if rule is not None:
            status_field = self._transitions.status_field(entity) or "status"
            current_status = current.get(status_field)
            if not rule.allows(current_status):
                logger.warning(
                    "Rejected %s on %s %s: %s is %r",
                    action.name,
                    entity.value,
                    record_id,
                    status_field,
                    current_status,
                )
                raise InvalidTransitionError(
                    action=action.name,
                    entity_type=entity.value,
                    record_id=record_id,
                    status_field=status_field,
                    current_status=current_status,
                    allowed=[status.value for status in rule.allowed_from],
                )

        changes = action.build_changes(payload, self._clock())
        await self._store.update_fields(entity, record_id, changes)
        updated = await self._store.get(entity, record_id)
        if updated is None:
            raise RecordNotFoundError(entity.value, record_id)
        logger.info("Applied %s on %s %s", action.name, entity.value, record_id)
        return self._codec.decode_record(entity, updated)
