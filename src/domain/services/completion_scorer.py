"""
Completion Scorer - Weighted profile completion percentage.

Categories and weights:
- basic info (name, email, phone; all or nothing): 25%
- education (degree 0.4, institution 0.4, GPA 0.2): 25%
- files (CV 0.6, transcript 0.4): 20%
- work experience (question answered, False counts): 10%
- availability (city 0.5, hours per week 0.5): 10%
- personal (statement 0.7, additional info 0.3): 10%
"""

from src.domain.entities import Student


WEIGHTS = {
    "basic_info": 0.25,
    "education": 0.25,
    "files": 0.20,
    "experience": 0.10,
    "availability": 0.10,
    "personal": 0.10,
}


def _education_score(student: Student) -> float:
    education = student.education
    score = 0.0
    if education.current_degree:
        score += 0.4
    if education.institution:
        score += 0.4
    if education.gpa is not None:
        score += 0.2
    return score


def _files_score(student: Student) -> float:
    score = 0.0
    if student.cv_file and student.cv_file.filename:
        score += 0.6
    transcript = student.education.transcript_file
    if transcript and transcript.filename:
        score += 0.4
    return score


def _availability_score(student: Student) -> float:
    score = 0.0
    if student.location.city:
        score += 0.5
    if student.availability.hours_per_week:
        score += 0.5
    return score


def _personal_score(student: Student) -> float:
    score = 0.0
    if student.personal_statement:
        score += 0.7
    if student.additional_info:
        score += 0.3
    return score


def calculate_completion_score(student: Student) -> int:
    """
    Calculate the profile completion percentage.

    Args:
        student: Profile record, possibly partial.

    Returns:
        Integer between 0 and 100.
    """
    score = 0.0

    if student.name and student.email and student.phone:
        score += WEIGHTS["basic_info"]

    score += WEIGHTS["education"] * _education_score(student)
    score += WEIGHTS["files"] * _files_score(student)

    if student.work_experience.has_experience is not None:
        score += WEIGHTS["experience"]

    score += WEIGHTS["availability"] * _availability_score(student)
    score += WEIGHTS["personal"] * _personal_score(student)

    return round(score * 100)


def get_validation_report(student: Student) -> dict:
    """Per-category presence flags plus the completion score."""
    return {
        "has_basic_info": bool(student.name and student.email and student.phone),
        "has_education": bool(
            student.education.current_degree and student.education.institution
        ),
        "has_gpa": student.education.gpa is not None,
        "has_work_experience": student.work_experience.has_experience is not None,
        "has_location": bool(student.location.city),
        "has_availability": bool(student.availability.hours_per_week),
        "has_personal_statement": bool(student.personal_statement),
        "has_links": student.links.has_any,
        "completion_percentage": calculate_completion_score(student),
    }


def get_completion_tips(student: Student) -> list[str]:
    """Hints (Hebrew, shown in the chat) for improving the profile."""
    tips = []

    if student.education.gpa is None:
        tips.append("הוסף את הממוצע שלך כדי לשפר את הפרופיל")

    transcript = student.education.transcript_file
    if not (transcript and transcript.filename):
        tips.append("העלה גליון ציונים לאימות הממוצע")

    if not student.personal_statement:
        tips.append("כתוב משפט אישי קצר על עצמך")

    if not student.links.has_any:
        tips.append("הוסף קישורים מקצועיים (GitHub, LinkedIn)")

    if student.work_experience.has_experience and not student.work_experience.description:
        tips.append("תאר את נסיון העבודה שלך")

    return tips
