"""
AnonymizedStudentView Value Object - What a recruiter sees of a profile.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AnonymizedStudentView:
    """
    Privacy-reduced snapshot of a student profile.

    Contact details (email, phone, links) are not part of the view at all.
    Nested sections are plain dicts copied from the source record.
    """

    id: str
    name: str
    personal_statement: str
    additional_info: str
    special_roles: str
    soft_skills: str
    key_info: str
    education: dict
    work_experience: dict
    location: dict
    availability: dict
    completion_percentage: int
    profile_complete: bool
    created_at: datetime
    last_updated: datetime
    cv_file: Optional[dict] = None
    has_access: bool = False

    def with_identity(self, real_name: str) -> "AnonymizedStudentView":
        """Copy of the view with the real name restored."""
        return replace(self, name=real_name, has_access=True)

    def to_dict(self) -> dict:
        """Serialize for the host layer."""
        return {
            "id": self.id,
            "name": self.name,
            "personal_statement": self.personal_statement,
            "additional_info": self.additional_info,
            "special_roles": self.special_roles,
            "soft_skills": self.soft_skills,
            "key_info": self.key_info,
            "education": self.education,
            "work_experience": self.work_experience,
            "location": self.location,
            "availability": self.availability,
            "completion_percentage": self.completion_percentage,
            "profile_complete": self.profile_complete,
            "created_at": self.created_at.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "cv_file": self.cv_file,
            "has_access": self.has_access,
        }
