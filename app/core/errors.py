"""Error hierarchy shared by the services and the HTTP layer."""

from __future__ import annotations

from typing import Any, Iterable


class DomainError(RuntimeError):
    """Base error for expected, caller-facing failures."""

    error_code: str = "DOMAIN_ERROR"
    http_status: int = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(DomainError):
    """Missing or malformed required input."""

    error_code = "VALIDATION_ERROR"
    http_status = 400


class AuthenticationError(DomainError):
    """Credential check failed. The message never reveals which part was wrong."""

    error_code = "AUTHENTICATION_ERROR"
    http_status = 401

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class NotFoundError(DomainError):
    """Identifier does not resolve."""

    error_code = "NOT_FOUND"
    http_status = 404


class RecordNotFoundError(NotFoundError):
    """Raised when a record could not be located in the store."""

    def __init__(self, entity_type: str, record_id: str) -> None:
        super().__init__(
            f"{entity_type} '{record_id}' not found",
            details={"entity": entity_type, "id": record_id},
        )
        self.entity_type = entity_type
        self.record_id = record_id


class UnknownActionError(NotFoundError):
    """Raised when no bound action is registered for an entity type."""

    error_code = "UNKNOWN_ACTION"


class ConflictError(DomainError):
    """Request conflicts with the current state of a record."""

    error_code = "CONFLICT"
    http_status = 409


class InvalidTransitionError(ConflictError):
    """The transition guard rejected an action for the record's current status."""

    error_code = "INVALID_TRANSITION"

    def __init__(
        self,
        *,
        action: str,
        entity_type: str,
        record_id: str,
        status_field: str,
        current_status: Any,
        allowed: Iterable[str],
    ) -> None:
        allowed_list = sorted(str(value) for value in allowed)
        super().__init__(
            f"Cannot {action} {entity_type} '{record_id}': current {status_field} is "
            f"'{current_status}', expected one of [{', '.join(allowed_list)}]",
            details={"currentStatus": current_status, "allowedFrom": allowed_list},
        )
        self.action = action
        self.current_status = current_status
        self.allowed = frozenset(allowed_list)


class DuplicateRecordError(ConflictError):
    """An insert reused an identifier already present in the entity set."""

    error_code = "DUPLICATE_RECORD"

    def __init__(self, entity_type: str, record_id: str) -> None:
        super().__init__(
            f"{entity_type} '{record_id}' already exists",
            details={"entity": entity_type, "id": record_id},
        )
        self.entity_type = entity_type
        self.record_id = record_id


class ServiceUnavailableError(DomainError):
    """A backing service has not been installed on the application."""

    error_code = "SERVICE_UNAVAILABLE"
    http_status = 503
