"""
Unit tests for the completion scorer.
"""

from src.domain.entities import FileReference, Student
from src.domain.services import (
    calculate_completion_score,
    get_completion_tips,
    get_validation_report,
)


def make_complete_student() -> Student:
    student = Student(
        session_id="s",
        name="Dana Levi",
        email="dana@example.com",
        phone="050-123-4567",
    )
    student.education.current_degree = "bachelor"
    student.education.institution = "Technion"
    student.education.gpa = 88.0
    student.education.transcript_file = FileReference("grades.pdf")
    student.cv_file = FileReference("cv.pdf")
    student.work_experience.has_experience = True
    student.work_experience.description = "QA intern"
    student.location.city = "Haifa"
    student.availability.hours_per_week = "part_time"
    student.personal_statement = "Curious and reliable"
    student.additional_info = "Available from March"
    student.links.github = "https://github.com/dana"
    return student


class TestCalculateCompletionScore:
    """Tests for calculate_completion_score."""

    def test_empty_profile(self):
        """Should score an empty profile as 0."""
        assert calculate_completion_score(Student(session_id="s")) == 0

    def test_complete_profile(self):
        """Should score a full profile as 100."""
        assert calculate_completion_score(make_complete_student()) == 100

    def test_basic_info_is_all_or_nothing(self):
        """Should not credit partial basic info."""
        partial = Student(session_id="s", name="Dana", email="dana@example.com")
        full = Student(session_id="s", name="Dana", email="dana@example.com", phone="050-123-4567")

        assert calculate_completion_score(partial) == 0
        assert calculate_completion_score(full) == 25

    def test_zero_gpa_counts(self):
        """Should credit a GPA of 0.0 as present."""
        student = Student(session_id="s")
        student.education.gpa = 0.0
        assert calculate_completion_score(student) == 5

    def test_no_experience_answer_counts(self):
        """Should credit an explicit 'no experience' answer."""
        student = Student(session_id="s")
        student.work_experience.has_experience = False
        assert calculate_completion_score(student) == 10

    def test_cv_only(self):
        """Should weight the CV as 60% of the files category."""
        student = Student(session_id="s", cv_file=FileReference("cv.pdf"))
        assert calculate_completion_score(student) == 12

    def test_score_never_decreases_as_fields_fill(self):
        """Should grow monotonically while the profile is filled in."""
        student = Student(session_id="s")
        steps = [
            lambda s: setattr(s, "name", "Dana"),
            lambda s: s.set_email("dana@example.com"),
            lambda s: setattr(s, "phone", "050-123-4567"),
            lambda s: setattr(s.education, "institution", "Technion"),
            lambda s: setattr(s.education, "current_degree", "master"),
            lambda s: setattr(s.education, "gpa", 90.0),
            lambda s: setattr(s, "cv_file", FileReference("cv.pdf")),
            lambda s: setattr(s.work_experience, "has_experience", False),
            lambda s: setattr(s.location, "city", "Tel Aviv"),
            lambda s: setattr(s.availability, "hours_per_week", "full_time"),
            lambda s: setattr(s, "personal_statement", "Hello"),
            lambda s: setattr(s, "additional_info", "More"),
        ]

        previous = calculate_completion_score(student)
        for step in steps:
            step(student)
            current = calculate_completion_score(student)
            assert 0 <= previous <= current <= 100
            previous = current


class TestValidationReport:
    """Tests for get_validation_report."""

    def test_report_for_empty_profile(self):
        """Should flag every category as missing."""
        report = get_validation_report(Student(session_id="s"))

        assert report["has_basic_info"] is False
        assert report["has_education"] is False
        assert report["has_gpa"] is False
        assert report["has_work_experience"] is False
        assert report["has_links"] is False
        assert report["completion_percentage"] == 0

    def test_report_for_complete_profile(self):
        """Should flag every category as present."""
        report = get_validation_report(make_complete_student())

        assert all(value is True for key, value in report.items() if key.startswith("has_"))
        assert report["completion_percentage"] == 100


class TestCompletionTips:
    """Tests for get_completion_tips."""

    def test_tips_for_empty_profile(self):
        """Should suggest the main missing items."""
        tips = get_completion_tips(Student(session_id="s"))
        assert len(tips) == 4

    def test_no_tips_for_complete_profile(self):
        """Should have nothing to suggest."""
        assert get_completion_tips(make_complete_student()) == []

    def test_experience_description_tip(self):
        """Should ask to describe claimed experience."""
        student = make_complete_student()
        student.work_experience.description = ""
        assert get_completion_tips(student) == ["תאר את נסיון העבודה שלך"]
