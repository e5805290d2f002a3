"""Errors raised by the scheduling core.

Every error carries the HTTP status it maps to, so the API layer can
translate them with a single handler.
"""


class SchedulingError(Exception):
    """Base class for scheduling failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message}


class ValidationError(SchedulingError):
    """Raised when a date, time or doctor identifier is missing or malformed."""

    status_code = 400


class BranchContextMissing(SchedulingError):
    """Raised when no branch scope can be resolved for a request."""

    status_code = 400

    def __init__(self, message: str = "Branch context required"):
        super().__init__(message)


class NotFoundError(SchedulingError):
    """Raised when an appointment or template does not exist within the branch."""

    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class ConflictError(SchedulingError):
    """Raised when a booking clashes with another, or a unique key is taken."""

    status_code = 409


class InvalidTransitionError(SchedulingError):
    """Raised when a status change is not allowed from the current status."""

    status_code = 400

    def __init__(self, from_status: str, to_status: str):
        super().__init__(f"Cannot transition {from_status} → {to_status}")
        self.from_status = from_status
        self.to_status = to_status

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "from_status": self.from_status,
            "to_status": self.to_status,
        }


__all__ = [
    "SchedulingError",
    "ValidationError",
    "BranchContextMissing",
    "NotFoundError",
    "ConflictError",
    "InvalidTransitionError",
]
