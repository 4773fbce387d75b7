"""
Domain Errors - Failure taxonomy for the intake core.

Callers map these to user-facing messages:
- NotFoundError: session or referenced record is absent
- ValidationError: malformed input, rejected before any mutation
- ConflictError: email already claimed by another active record
- StorageError: store or unexpected failure
"""

from typing import Optional


class IntakeError(Exception):
    """
    Base class for intake errors.

    Attributes:
        message: Human-readable description.
        field: Offending input field, if any.
        record_id: Id of the record involved, if any.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        record_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.record_id = record_id

    def to_dict(self) -> dict:
        """Error payload for the host layer."""
        data: dict = {"error": self.message, "type": type(self).__name__}
        if self.field:
            data["field"] = self.field
        if self.record_id:
            data["record_id"] = self.record_id
        return data


class NotFoundError(IntakeError):
    """Session or referenced record does not exist."""


class ValidationError(IntakeError):
    """Input is malformed (email, phone, file)."""


class ConflictError(IntakeError):
    """Email is already claimed by a different active record."""


class StorageError(IntakeError):
    """Underlying store failed."""
