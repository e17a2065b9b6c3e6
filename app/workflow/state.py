from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from app.records.entities import EntityType


class ValidationStatus(str, Enum):
    """States shared by imputations and imputation periods."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    VALIDATED = "VALIDATED"
    REJECTED = "REJECTED"


@dataclass(frozen=True, slots=True)
class TransitionRule:
    """Statuses an action may start from and the status it leads to."""

    allowed_from: frozenset[ValidationStatus]
    target: ValidationStatus

    def allows(self, current: object) -> bool:
        return any(current == status.value for status in self.allowed_from)


def _rule(*allowed_from: ValidationStatus, to: ValidationStatus) -> TransitionRule:
    return TransitionRule(allowed_from=frozenset(allowed_from), target=to)


IMPUTATION_TRANSITIONS: Mapping[str, TransitionRule] = {
    "validate": _rule(
        ValidationStatus.DRAFT,
        ValidationStatus.SUBMITTED,
        ValidationStatus.REJECTED,
        to=ValidationStatus.VALIDATED,
    ),
    "reject": _rule(ValidationStatus.DRAFT, ValidationStatus.SUBMITTED, to=ValidationStatus.REJECTED),
}

# VALIDATED periods are terminal: no rule starts from it.
PERIOD_TRANSITIONS: Mapping[str, TransitionRule] = {
    "submit": _rule(ValidationStatus.DRAFT, ValidationStatus.REJECTED, to=ValidationStatus.SUBMITTED),
    "validate": _rule(ValidationStatus.SUBMITTED, to=ValidationStatus.VALIDATED),
    "reject": _rule(ValidationStatus.SUBMITTED, to=ValidationStatus.REJECTED),
}

TRANSITION_TABLES: Mapping[EntityType, Mapping[str, TransitionRule]] = {
    EntityType.IMPUTATIONS: IMPUTATION_TRANSITIONS,
    EntityType.IMPUTATION_PERIODS: PERIOD_TRANSITIONS,
}

STATUS_FIELDS: Mapping[EntityType, str] = {
    EntityType.IMPUTATIONS: "validationStatus",
    EntityType.IMPUTATION_PERIODS: "status",
}


class TransitionTable:
    """Lookup over the static transition tables."""

    def __init__(
        self,
        tables: Mapping[EntityType, Mapping[str, TransitionRule]] | None = None,
        status_fields: Mapping[EntityType, str] | None = None,
    ) -> None:
        self._tables = tables if tables is not None else TRANSITION_TABLES
        self._status_fields = status_fields if status_fields is not None else STATUS_FIELDS

    def rule_for(self, entity_type: EntityType, action: str) -> TransitionRule | None:
        return self._tables.get(entity_type, {}).get(action)

    def status_field(self, entity_type: EntityType) -> str | None:
        return self._status_fields.get(entity_type)
