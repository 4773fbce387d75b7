# Domain Entities
from .student import (
    Availability,
    ChatProgress,
    Education,
    FileReference,
    Links,
    Location,
    Student,
    WorkExperience,
)
from .exposure import Exposure

__all__ = [
    "Availability",
    "ChatProgress",
    "Education",
    "Exposure",
    "FileReference",
    "Links",
    "Location",
    "Student",
    "WorkExperience",
]
