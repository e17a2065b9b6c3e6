from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class EntityType(str, Enum):
    """Entity sets persisted in the record store."""

    TICKETS = "Tickets"
    USERS = "Users"
    PROJECTS = "Projects"
    ABAQUES = "Abaques"
    DOCUMENTATION_OBJECTS = "DocumentationObjects"
    EVALUATIONS = "Evaluations"
    NOTIFICATIONS = "Notifications"
    DELIVERABLES = "Deliverables"
    LEAVE_REQUESTS = "LeaveRequests"
    IMPUTATIONS = "Imputations"
    IMPUTATION_PERIODS = "ImputationPeriods"
    TIME_LOGS = "TimeLogs"
    TIMESHEETS = "Timesheets"


class DecodeFallback(str, Enum):
    """What a structured field decodes to when its stored text is malformed."""

    RAW = "raw"
    EMPTY_LIST = "empty_list"


@dataclass(frozen=True, slots=True)
class EntitySchema:
    """Per-entity storage rules applied where records cross the store boundary."""

    entity_type: EntityType
    structured_fields: tuple[str, ...] = ()
    # Serialised on create only; reads and updates leave them as stored.
    create_serialized_fields: tuple[str, ...] = ()
    decode_fallback: DecodeFallback = DecodeFallback.RAW
    stamp_created_at: bool = False
    create_defaults: Mapping[str, object] = field(default_factory=dict)


_SCHEMAS: dict[EntityType, EntitySchema] = {
    schema.entity_type: schema
    for schema in (
        EntitySchema(
            EntityType.TICKETS,
            structured_fields=("history", "tags", "documentationObjectIds"),
            create_serialized_fields=("skills",),
            decode_fallback=DecodeFallback.EMPTY_LIST,
        ),
        EntitySchema(EntityType.USERS, structured_fields=("skills", "certifications")),
        EntitySchema(EntityType.PROJECTS, structured_fields=("techKeywords",)),
        EntitySchema(EntityType.ABAQUES, structured_fields=("entries",)),
        EntitySchema(
            EntityType.DOCUMENTATION_OBJECTS,
            structured_fields=("attachedFiles", "relatedTicketIds"),
        ),
        EntitySchema(
            EntityType.EVALUATIONS,
            structured_fields=("qualitativeGrid",),
            stamp_created_at=True,
        ),
        EntitySchema(EntityType.NOTIFICATIONS, stamp_created_at=True),
        EntitySchema(EntityType.DELIVERABLES, stamp_created_at=True),
        EntitySchema(EntityType.LEAVE_REQUESTS, stamp_created_at=True),
        EntitySchema(
            EntityType.IMPUTATIONS,
            stamp_created_at=True,
            create_defaults={"validationStatus": "DRAFT", "validatedBy": None, "validatedAt": None},
        ),
        EntitySchema(
            EntityType.IMPUTATION_PERIODS,
            stamp_created_at=True,
            create_defaults={"status": "DRAFT", "sentToStraTIME": False},
        ),
        EntitySchema(
            EntityType.TIME_LOGS,
            stamp_created_at=True,
            create_defaults={"sentToStraTIME": False},
        ),
        EntitySchema(EntityType.TIMESHEETS, stamp_created_at=True),
    )
}


def schema_for(entity_type: EntityType | str) -> EntitySchema:
    """Return the storage schema registered for ``entity_type``."""

    return _SCHEMAS[EntityType(entity_type)]
