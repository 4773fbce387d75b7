"""
Exposure Entity - Time-bound grant letting a recruiter see a candidate's identity.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Exposure:
    """
    Exposure grant for a viewer on a student profile.

    Grants are issued and revoked outside the intake core; here they are
    only read to decide whether the real name may be shown.

    Attributes:
        viewer_id: Recruiter/agency user id
        student_id: Id of the exposed student record
        expires_at: Grant expiry
        is_active: False once revoked
        id: Database primary key (None for new grants)
        created_at: When the grant was issued
    """

    viewer_id: str
    student_id: str
    expires_at: datetime
    is_active: bool = True
    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        """Validate and normalize grant data."""
        if not self.viewer_id:
            raise ValueError("viewer_id is required")
        if not self.student_id:
            raise ValueError("student_id is required")
        if isinstance(self.expires_at, str):
            self.expires_at = datetime.fromisoformat(self.expires_at)
        if isinstance(self.created_at, str):
            self.created_at = datetime.fromisoformat(self.created_at)

    def is_live(self, now: Optional[datetime] = None) -> bool:
        """Active and not yet expired."""
        return self.is_active and self.expires_at > (now or datetime.now())

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage."""
        return {
            "viewer_id": self.viewer_id,
            "student_id": self.student_id,
            "expires_at": self.expires_at.isoformat(timespec="microseconds"),
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(timespec="microseconds"),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Exposure":
        """Create Exposure from dictionary (database row)."""
        return cls(
            id=data.get("id"),
            viewer_id=data["viewer_id"],
            student_id=data["student_id"],
            expires_at=data["expires_at"],
            is_active=bool(data.get("is_active", True)),
            created_at=data.get("created_at") or datetime.now(),
        )
