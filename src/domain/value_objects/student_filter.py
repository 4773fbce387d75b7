"""
StudentFilter Value Object - Immutable recruiter browse filters.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional


def _parse_bool(value: Any) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    return None


def _parse_float(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _parse_text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


@dataclass(frozen=True)
class StudentFilter:
    """
    Immutable value object for browsing active profiles.

    Empty strings and None mean "no constraint".

    Attributes:
        search: Case-insensitive substring of name, institution, degree field or city
        completed: True for completed profiles, False for in-progress, None for all
        gpa_min / gpa_max: Inclusive GPA bounds (profiles without a GPA are excluded)
        has_experience: Match the work experience flag
        institution / degree_field / current_degree / study_year / hours_per_week:
            Exact matches
        city: Case-insensitive substring of the preferred city
        flexible_hours: Match the flexible hours flag
    """

    search: str = ""
    completed: Optional[bool] = True
    gpa_min: Optional[float] = None
    gpa_max: Optional[float] = None
    has_experience: Optional[bool] = None
    institution: str = ""
    degree_field: str = ""
    current_degree: str = ""
    hours_per_week: str = ""
    study_year: str = ""
    city: str = ""
    flexible_hours: Optional[bool] = None

    @classmethod
    def from_query(cls, params: dict) -> "StudentFilter":
        """
        Build a filter from query-string style values.

        Keys are snake_case or camelCase; booleans are "true"/"false" and
        `completed` also accepts "all". Unparseable values are ignored.
        """
        def get(name: str, camel: str) -> Any:
            return params.get(name, params.get(camel))

        completed = get("completed", "completed")
        if completed is None:
            completed_value: Optional[bool] = True
        elif str(completed).strip().lower() == "all":
            completed_value = None
        else:
            completed_value = _parse_bool(completed)
            if completed_value is None:
                completed_value = True

        return cls(
            search=_parse_text(get("search", "search")),
            completed=completed_value,
            gpa_min=_parse_float(get("gpa_min", "gpaMin")),
            gpa_max=_parse_float(get("gpa_max", "gpaMax")),
            has_experience=_parse_bool(get("has_experience", "hasExperience")),
            institution=_parse_text(get("institution", "institution")),
            degree_field=_parse_text(get("degree_field", "degreeField")),
            current_degree=_parse_text(get("current_degree", "currentDegree")),
            hours_per_week=_parse_text(get("hours_per_week", "hoursPerWeek")),
            study_year=_parse_text(get("study_year", "studyYear")),
            city=_parse_text(get("city", "city")),
            flexible_hours=_parse_bool(get("flexible_hours", "flexibleHours")),
        )

