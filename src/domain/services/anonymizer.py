"""
Anonymizer - Build recruiter-facing views of student profiles.

Recruiters browse masked profiles. Holding a live exposure grant for a
profile restores the real name; contact details stay hidden regardless.
"""

from typing import AbstractSet, Optional

from src.domain.entities import Student
from src.domain.value_objects import AnonymizedStudentView

from .completion_scorer import calculate_completion_score
from .masking_service import mask_sensitive_data


NAME_PLACEHOLDER = "&*******&"


def _education_without_paths(student: Student) -> dict:
    education = student.education.to_dict()
    transcript = education.get("transcript_file")
    if transcript:
        transcript.pop("path", None)
    return education


def _cv_summary(student: Student) -> Optional[dict]:
    if not (student.cv_file and student.cv_file.filename):
        return None
    return {
        "filename": student.cv_file.filename,
        "upload_date": student.cv_file.upload_date.isoformat(),
    }


def anonymize_student(
    student: Student,
    placeholder: str = NAME_PLACEHOLDER,
) -> AnonymizedStudentView:
    """
    Fully masked view of a student.

    Args:
        student: Source record (not modified).
        placeholder: Token shown instead of the name.

    Returns:
        AnonymizedStudentView without contact details.
    """
    return AnonymizedStudentView(
        id=student.id,
        name=placeholder,
        personal_statement=mask_sensitive_data(student.personal_statement),
        additional_info=mask_sensitive_data(student.additional_info),
        special_roles=mask_sensitive_data(student.special_roles),
        soft_skills=mask_sensitive_data(student.soft_skills),
        key_info=mask_sensitive_data(student.key_info),
        education=_education_without_paths(student),
        work_experience=student.work_experience.to_dict(),
        location=student.location.to_dict(),
        availability=student.availability.to_dict(),
        completion_percentage=calculate_completion_score(student),
        profile_complete=student.profile_complete,
        created_at=student.created_at,
        last_updated=student.last_updated,
        cv_file=_cv_summary(student),
    )


def build_anonymized_view(
    student: Student,
    granted_ids: Optional[AbstractSet[str]] = None,
    placeholder: str = NAME_PLACEHOLDER,
) -> AnonymizedStudentView:
    """
    Recruiter view of a student, honouring exposure grants.

    Args:
        student: Source record (not modified).
        granted_ids: Student ids the viewer holds a live exposure grant for.
        placeholder: Token shown instead of the name.

    Returns:
        Masked view; with the real name and has_access=True when granted.
    """
    view = anonymize_student(student, placeholder)
    if granted_ids and student.id in granted_ids:
        return view.with_identity(student.name)
    return view
