"""Domain exceptions for the operations core.

Defines domain-level exceptions for the event queue, the document status
machine and the workflow engine registry. These exceptions are independent
of infrastructure concerns. The API layer maps them to HTTP responses in
exception handlers; the event processor treats any of them raised inside a
handler as a failed attempt.
"""

from typing import Any


class OperationsException(Exception):
    """Base exception for all operations core errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the error as a JSON-serializable dict (error, message, details)."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(OperationsException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(OperationsException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'workflow', 'event').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DuplicateEventException(OperationsException):
    """Raised when publishing an event whose id already exists."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            f"Event already exists: {event_id}",
            "DUPLICATE_EVENT",
            {"event_id": event_id},
        )


class InvalidTransitionException(OperationsException):
    """Raised when a document status transition is not allowed."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None) -> None:
        """Initialize with the attempted transition.

        Args:
            from_status: Current document status.
            to_status: Requested document status.
            reason: Optional extra explanation (e.g. missing document_id).
        """
        message = f"Invalid document transition: {from_status} -> {to_status}"
        if reason:
            message = f"{message} ({reason})"
        details: dict[str, Any] = {"from": from_status, "to": to_status}
        if reason:
            details["reason"] = reason
        super().__init__(message, "INVALID_TRANSITION", details)

    @property
    def from_status(self) -> str:
        return self.details["from"]

    @property
    def to_status(self) -> str:
        return self.details["to"]


class TransientStorageException(OperationsException):
    """Raised when a storage round trip fails; callers back off and retry."""

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        super().__init__(
            f"Storage operation failed: {operation}",
            "TRANSIENT_STORAGE_ERROR",
            {"operation": operation, "cause": str(cause) if cause else None},
        )


class HandlerException(OperationsException):
    """Raised when an event handler fails; drives the retry/dead-letter path."""

    def __init__(self, event_id: str, event_type: str, cause: BaseException) -> None:
        super().__init__(
            f"Handler for event {event_id} ({event_type}) failed: {cause}",
            "HANDLER_ERROR",
            {
                "event_id": event_id,
                "event_type": event_type,
                "cause": type(cause).__name__,
            },
        )


class UnknownWorkflowEngineException(OperationsException):
    """Raised when an engine id is not registered (checked at startup)."""

    def __init__(self, engine_ids: list[str]) -> None:
        super().__init__(
            f"Unknown workflow engine(s): {', '.join(sorted(engine_ids))}",
            "UNKNOWN_WORKFLOW_ENGINE",
            {"engine_ids": sorted(engine_ids)},
        )


class MissingEventHandlerException(OperationsException):
    """Raised at startup when expected (object_type, type) pairs have no handler."""

    def __init__(self, missing: list[tuple[str, str]]) -> None:
        super().__init__(
            "No handler registered for: "
            + ", ".join(f"{o}/{t}" for o, t in missing),
            "MISSING_EVENT_HANDLER",
            {"missing": [f"{o}/{t}" for o, t in missing]},
        )
