# Domain Value Objects
from .anonymized_view import AnonymizedStudentView
from .label_mapping import DEGREE_LABELS, HOURS_LABELS, LabelMapping
from .profile_submission import NONE_ANSWER, ProfileSubmission, parse_gpa
from .student_filter import StudentFilter

__all__ = [
    "AnonymizedStudentView",
    "DEGREE_LABELS",
    "HOURS_LABELS",
    "LabelMapping",
    "NONE_ANSWER",
    "ProfileSubmission",
    "StudentFilter",
    "parse_gpa",
]
