"""
Typed exceptions raised by the pipeline and ledger services.

Every error carries a machine-readable ``code`` and the structured data a
caller needs to react to it, so the API layer can map errors by type
instead of parsing messages.

    AgencyError (base)
    +-- NotFoundError            NOT_FOUND
    +-- InvalidTransitionError   INVALID_TRANSITION
    +-- ValidationError          VALIDATION_ERROR
    +-- UnauthorizedError        UNAUTHORIZED
    +-- ConflictError            CONFLICT
"""
from __future__ import annotations

from typing import Any


class AgencyError(Exception):
    """Base class for every domain error."""

    code: str = "AGENCY_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def as_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class NotFoundError(AgencyError):
    """A referenced record does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} no existe.")

    def as_dict(self) -> dict[str, Any]:
        data = super().as_dict()
        data.update({"entity": self.entity, "entity_id": str(self.entity_id)})
        return data


class InvalidTransitionError(AgencyError):
    """The requested status is not reachable from the current one."""

    code = "INVALID_TRANSITION"

    def __init__(self, entity_id: Any, from_status: str, to_status: str):
        self.entity_id = entity_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Transición inválida para {entity_id}: {from_status} -> {to_status}."
        )

    def as_dict(self) -> dict[str, Any]:
        data = super().as_dict()
        data.update({
            "entity_id": str(self.entity_id),
            "from_status": self.from_status,
            "to_status": self.to_status,
        })
        return data


class ValidationError(AgencyError, ValueError):
    """An input value is missing, malformed or out of range."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)

    def as_dict(self) -> dict[str, Any]:
        data = super().as_dict()
        data["field"] = self.field
        return data


class UnauthorizedError(AgencyError):
    """The operation was invoked without an authenticated actor."""

    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Se requiere un usuario autenticado."):
        super().__init__(message)


class ConflictError(AgencyError):
    """The record changed underneath the caller, or the work was already done."""

    code = "CONFLICT"

    def __init__(self, message: str, entity_id: Any = None):
        self.entity_id = entity_id
        super().__init__(message)
