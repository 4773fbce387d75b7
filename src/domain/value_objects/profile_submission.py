"""
ProfileSubmission Value Object - Final answers submitted by the intake chat.
"""

from dataclasses import dataclass, fields
from typing import Any, Iterator, Optional, Union


# Answer the chat sends for "no experience" / "no links"
NONE_ANSWER = "אין"


# Chat client payload keys -> attribute names
_CLIENT_KEYS = {
    "degreeType": "degree_type",
    "softSkills": "soft_skills",
    "keyInfo": "key_info",
    "specialRoles": "special_roles",
    "personalStatement": "personal_statement",
    "additionalInfo": "additional_info",
}


def parse_gpa(value: Any) -> Optional[float]:
    """Numeric GPA or None; never raises."""
    if value is None or isinstance(value, bool):
        return None
    try:
        gpa = float(str(value).strip())
    except ValueError:
        return None
    if gpa != gpa or gpa in (float("inf"), float("-inf")):
        return None
    return gpa


@dataclass(frozen=True)
class ProfileSubmission:
    """
    Immutable set of answers collected by the chat.

    Every attribute is optional; None means the chat did not supply it and
    the corresponding profile field is left as it is.

    Attributes:
        name / email / phone: Basic identity
        institution / major / degree_type / year / gpa: Education answers
        experience: Experience text, or NONE_ANSWER
        location: Preferred city/area
        hours: Hours-per-week label
        soft_skills / key_info / special_roles /
        personal_statement / additional_info: Free-text answers
        links: A single URL, or NONE_ANSWER
    """

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    institution: Optional[str] = None
    major: Optional[str] = None
    degree_type: Optional[str] = None
    year: Optional[str] = None
    gpa: Optional[Union[str, float]] = None
    experience: Optional[str] = None
    location: Optional[str] = None
    hours: Optional[str] = None
    soft_skills: Optional[str] = None
    key_info: Optional[str] = None
    special_roles: Optional[str] = None
    personal_statement: Optional[str] = None
    additional_info: Optional[str] = None
    links: Optional[str] = None

    @property
    def normalized_email(self) -> Optional[str]:
        return self.email.strip().lower() if self.email and self.email.strip() else None

    def supplied(self) -> Iterator[tuple[str, Any]]:
        """Yield (attribute, value) for every answer the chat supplied."""
        for item in fields(self):
            value = getattr(self, item.name)
            if value is not None:
                yield item.name, value

    def to_dict(self) -> dict:
        return dict(self.supplied())

    @classmethod
    def from_dict(cls, data: dict) -> "ProfileSubmission":
        """Create from a chat payload (camelCase or snake_case keys)."""
        known = {item.name for item in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _CLIENT_KEYS.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)
