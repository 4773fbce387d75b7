"""
Student Entity - Candidate profile built up by the intake chat.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Accept datetime, ISO string or None."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Fixed-width ISO format so stored timestamps compare as strings."""
    return value.isoformat(timespec="microseconds") if value else None


@dataclass
class FileReference:
    """
    Reference to an uploaded file.

    Attributes:
        filename: Original file name
        upload_date: When the file was attached
        path: Storage path (never shown to recruiters)
    """

    filename: str
    upload_date: datetime = field(default_factory=datetime.now)
    path: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "filename": self.filename,
            "upload_date": _format_datetime(self.upload_date),
        }
        if self.path:
            data["path"] = self.path
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["FileReference"]:
        if not data or not data.get("filename"):
            return None
        return cls(
            filename=data["filename"],
            upload_date=_parse_datetime(data.get("upload_date")) or datetime.now(),
            path=data.get("path"),
        )


@dataclass
class Education:
    """Education details collected in the chat."""

    institution: str = ""
    degree_field: str = ""
    current_degree: str = ""
    study_year: str = ""
    gpa: Optional[float] = None
    transcript_file: Optional[FileReference] = None

    def to_dict(self) -> dict:
        return {
            "institution": self.institution,
            "degree_field": self.degree_field,
            "current_degree": self.current_degree,
            "study_year": self.study_year,
            "gpa": self.gpa,
            "transcript_file": self.transcript_file.to_dict() if self.transcript_file else None,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Education":
        data = data or {}
        return cls(
            institution=data.get("institution", ""),
            degree_field=data.get("degree_field", ""),
            current_degree=data.get("current_degree", ""),
            study_year=data.get("study_year", ""),
            gpa=data.get("gpa"),
            transcript_file=FileReference.from_dict(data.get("transcript_file")),
        )


@dataclass
class WorkExperience:
    """
    Work experience answer.

    has_experience stays None until the question is answered; False is an answer.
    """

    has_experience: Optional[bool] = None
    description: str = ""

    def to_dict(self) -> dict:
        return {"has_experience": self.has_experience, "description": self.description}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "WorkExperience":
        data = data or {}
        return cls(
            has_experience=data.get("has_experience"),
            description=data.get("description", ""),
        )


@dataclass
class Location:
    """Preferred work area."""

    city: str = ""

    def to_dict(self) -> dict:
        return {"city": self.city}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Location":
        return cls(city=(data or {}).get("city", ""))


@dataclass
class Availability:
    """Working hours availability."""

    hours_per_week: str = ""
    flexible_hours: Optional[bool] = None

    def to_dict(self) -> dict:
        return {
            "hours_per_week": self.hours_per_week,
            "flexible_hours": self.flexible_hours,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Availability":
        data = data or {}
        return cls(
            hours_per_week=data.get("hours_per_week", ""),
            flexible_hours=data.get("flexible_hours"),
        )


@dataclass
class Links:
    """Professional links, one URL per slot."""

    github: str = ""
    linkedin: str = ""
    portfolio: str = ""

    @property
    def has_any(self) -> bool:
        return bool(self.github or self.linkedin or self.portfolio)

    def assign(self, url: str) -> None:
        """Put a URL into the slot inferred from its host."""
        if "github.com" in url:
            self.github = url
        elif "linkedin.com" in url:
            self.linkedin = url
        else:
            self.portfolio = url

    def to_dict(self) -> dict:
        return {"github": self.github, "linkedin": self.linkedin, "portfolio": self.portfolio}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Links":
        data = data or {}
        return cls(
            github=data.get("github", ""),
            linkedin=data.get("linkedin", ""),
            portfolio=data.get("portfolio", ""),
        )


@dataclass
class ChatProgress:
    """Position of the candidate in the intake chat."""

    current_step: int = 1
    completed: bool = False

    def to_dict(self) -> dict:
        return {"current_step": self.current_step, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ChatProgress":
        data = data or {}
        return cls(
            current_step=data.get("current_step", 1),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class Student:
    """
    Student entity representing a candidate profile.

    A record is created empty when a chat session starts and is filled in
    step by step. Superseded records are deactivated and point forward to
    their successor through `replaced_by`.

    Attributes:
        session_id: Chat session token (unique)
        id: Record identity
        name: Full name
        email: Contact email, case-folded (unique among active records)
        phone: Formatted phone number
        is_active: False once expired or superseded
        replaced_by: Id of the record that superseded this one
        education: Education sub-record
        work_experience: Work experience sub-record
        location: Location sub-record
        availability: Availability sub-record
        links: Professional links
        cv_file: Uploaded CV reference
        personal_statement / additional_info / special_roles /
        soft_skills / key_info: Free-text answers
        profile_complete: Profile finalized
        terms_accepted: Terms of use accepted
        terms_accepted_date: When terms were accepted
        chat_progress: Current chat step
    """

    session_id: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    name: str = ""
    email: Optional[str] = None
    phone: str = ""
    is_active: bool = True
    replaced_by: Optional[str] = None
    education: Education = field(default_factory=Education)
    work_experience: WorkExperience = field(default_factory=WorkExperience)
    location: Location = field(default_factory=Location)
    availability: Availability = field(default_factory=Availability)
    links: Links = field(default_factory=Links)
    cv_file: Optional[FileReference] = None
    personal_statement: str = ""
    additional_info: str = ""
    special_roles: str = ""
    soft_skills: str = ""
    key_info: str = ""
    profile_complete: bool = False
    terms_accepted: bool = False
    terms_accepted_date: Optional[datetime] = None
    chat_progress: ChatProgress = field(default_factory=ChatProgress)
    created_at: datetime = field(default_factory=datetime.now)
    last_updated: datetime = field(default_factory=datetime.now)
    last_accessed: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        """Validate and normalize student data."""
        if not self.session_id:
            raise ValueError("session_id is required")
        self.email = self.email.strip().lower() if self.email else None

    def set_email(self, email: Optional[str]) -> None:
        """Assign a case-folded email (empty clears it)."""
        self.email = email.strip().lower() if email else None

    def touch(self) -> None:
        """Mark the record as updated now."""
        self.last_updated = datetime.now()

    def supersede(self, successor_id: str) -> None:
        """Deactivate this record in favour of `successor_id`."""
        if successor_id == self.id:
            raise ValueError("A record cannot supersede itself")
        self.is_active = False
        self.replaced_by = successor_id
        self.touch()

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "is_active": self.is_active,
            "replaced_by": self.replaced_by,
            "education": self.education.to_dict(),
            "work_experience": self.work_experience.to_dict(),
            "location": self.location.to_dict(),
            "availability": self.availability.to_dict(),
            "links": self.links.to_dict(),
            "cv_file": self.cv_file.to_dict() if self.cv_file else None,
            "personal_statement": self.personal_statement,
            "additional_info": self.additional_info,
            "special_roles": self.special_roles,
            "soft_skills": self.soft_skills,
            "key_info": self.key_info,
            "profile_complete": self.profile_complete,
            "terms_accepted": self.terms_accepted,
            "terms_accepted_date": _format_datetime(self.terms_accepted_date),
            "chat_progress": self.chat_progress.to_dict(),
            "created_at": _format_datetime(self.created_at),
            "last_updated": _format_datetime(self.last_updated),
            "last_accessed": _format_datetime(self.last_accessed),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Student":
        """Create Student from dictionary (decoded database row)."""
        return cls(
            id=data["id"],
            session_id=data["session_id"],
            name=data.get("name") or "",
            email=data.get("email"),
            phone=data.get("phone") or "",
            is_active=bool(data.get("is_active", True)),
            replaced_by=data.get("replaced_by"),
            education=Education.from_dict(data.get("education")),
            work_experience=WorkExperience.from_dict(data.get("work_experience")),
            location=Location.from_dict(data.get("location")),
            availability=Availability.from_dict(data.get("availability")),
            links=Links.from_dict(data.get("links")),
            cv_file=FileReference.from_dict(data.get("cv_file")),
            personal_statement=data.get("personal_statement") or "",
            additional_info=data.get("additional_info") or "",
            special_roles=data.get("special_roles") or "",
            soft_skills=data.get("soft_skills") or "",
            key_info=data.get("key_info") or "",
            profile_complete=bool(data.get("profile_complete", False)),
            terms_accepted=bool(data.get("terms_accepted", False)),
            terms_accepted_date=_parse_datetime(data.get("terms_accepted_date")),
            chat_progress=ChatProgress.from_dict(data.get("chat_progress")),
            created_at=_parse_datetime(data.get("created_at")) or datetime.now(),
            last_updated=_parse_datetime(data.get("last_updated")) or datetime.now(),
            last_accessed=_parse_datetime(data.get("last_accessed")) or datetime.now(),
        )
