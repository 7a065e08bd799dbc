"""
Error taxonomy for the review core.

Every error carries a structured ``detail`` dict so callers can render a
precise message without parsing strings. HTTP status codes are attached here
and applied by the exception handlers in ``naming_review.main``.
"""
from typing import Any, Optional


class NamingReviewError(Exception):
    """Base class for all errors raised by the review core."""
    status_code = 400
    code = "error"

    def __init__(self, message: str, detail: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message, "detail": self.detail}


class ValidationError(NamingReviewError):
    """Bad input shape, missing required field or option violation."""
    status_code = 422
    code = "validation_error"

    def __init__(self, errors: list[dict[str, str]], message: Optional[str] = None):
        self.errors = errors
        if message is None:
            fields = ", ".join(e["field"] for e in errors if e.get("field"))
            message = f"Validation failed for: {fields}" if fields else "Validation failed"
        super().__init__(message, {"errors": errors})

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])

    @property
    def fields(self) -> list[str]:
        return [e["field"] for e in self.errors]


class InvalidTransitionError(NamingReviewError):
    """Raised when a status change is not an allowed edge."""
    status_code = 409
    code = "invalid_transition"

    def __init__(self, request_id: Any, current_status: str, requested_status: str):
        self.request_id = request_id
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            f"Invalid transition from {current_status} to {requested_status}",
            {
                "request_id": str(request_id),
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )


class AlreadyClaimedError(NamingReviewError):
    """Another reviewer already owns the request."""
    status_code = 409
    code = "already_claimed"

    def __init__(self, request_id: Any, reviewer_id: Optional[str]):
        self.request_id = request_id
        self.reviewer_id = reviewer_id
        super().__init__(
            f"Request {request_id} is already claimed",
            {"request_id": str(request_id), "reviewer_id": reviewer_id},
        )


class NotFoundError(NamingReviewError):
    status_code = 404
    code = "not_found"

    def __init__(self, resource: str, resource_id: Any):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            f"{resource} {resource_id} not found",
            {"resource": resource, "id": str(resource_id)},
        )


class ConflictError(NamingReviewError):
    status_code = 409
    code = "conflict"

    def __init__(self, resource: str, resource_id: Any, reason: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            reason,
            {"resource": resource, "id": str(resource_id), "reason": reason},
        )


class StorageError(NamingReviewError):
    """Persistence failure or timeout. Never retried by the core."""
    status_code = 503
    code = "storage_error"

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        super().__init__(
            message or f"Storage failure during {operation}",
            {"operation": operation},
        )
