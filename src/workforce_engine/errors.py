"""Domain exceptions shared by services and the API layer."""

from __future__ import annotations

from typing import Any


class WorkforceError(Exception):
    """Base class for all domain errors."""


class ValidationError(WorkforceError):
    """Raised when input is malformed or missing.

    Carries a list of field-level errors: ``[{"field": ..., "message": ...}]``.
    """

    def __init__(self, errors: list[dict[str, Any]] | str, field: str | None = None):
        if isinstance(errors, str):
            errors = [{"field": field, "message": errors}]
        self.errors = errors
        super().__init__("; ".join(str(e["message"]) for e in errors))


def null_field_errors(values: dict[str, Any], required: tuple[str, ...]) -> list[dict[str, Any]]:
    """Field errors for required fields that are present but explicitly null."""
    return [
        {"field": name, "message": f"{name} cannot be null"}
        for name in required
        if name in values and values[name] is None
    ]


class NotFoundError(WorkforceError):
    """Raised when an id does not resolve to a record."""

    def __init__(self, entity: str, key: Any = None):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found")


class ConflictError(WorkforceError):
    """Raised when a uniqueness rule would be violated."""


class InvalidTransitionError(WorkforceError):
    """Raised when an invalid lifecycle transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class AuthenticationError(WorkforceError):
    """Raised when credentials are missing, invalid or expired."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(WorkforceError):
    """Raised when the caller may not perform an action.

    ``reason`` is a machine-readable code for logs; it is never sent to the
    caller.
    """

    def __init__(self, reason: str = "denied"):
        self.reason = reason
        super().__init__("Access denied")


class StorageError(WorkforceError):
    """Raised when the underlying store fails."""
