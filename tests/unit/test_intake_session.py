"""
Unit tests for IntakeSessionService.
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, Mock

from src.application.use_cases import IntakeSessionService
from src.domain.entities import Exposure, Student
from src.domain.errors import ConflictError, NotFoundError, StorageError, ValidationError
from src.domain.value_objects import ProfileSubmission, StudentFilter
from src.infrastructure.parsers import ParsedCV


class FakeCVParser:
    """Returns a fixed parse result."""

    def __init__(self, parsed: ParsedCV) -> None:
        self.parsed = parsed
        self.calls = []

    async def parse(self, file_path):
        self.calls.append(file_path)
        return self.parsed


@pytest.fixture
def parsed_cv() -> ParsedCV:
    return ParsedCV(
        name="Dana Levi",
        email="Dana@Example.com",
        phone="0501234567",
        confidence={"name": 0.6, "email": 0.95, "phone": 0.9},
    )


@pytest.fixture
def service(storage, settings, parsed_cv) -> IntakeSessionService:
    return IntakeSessionService(storage, settings, cv_parser=FakeCVParser(parsed_cv))


@pytest.fixture
def cv_file(tmp_path):
    path = tmp_path / "dana_cv.pdf"
    path.write_bytes(b"%PDF-1.4 test")
    return path


class TestSessionLifecycle:
    """Tests for session creation and lookup."""

    async def test_create_session(self, service):
        """Should create an empty profile for a new token."""
        student = await service.create_session("sess-1")

        assert student.session_id == "sess-1"
        assert student.is_active is True

    async def test_create_session_reuses_record(self, service, storage):
        """Should reactivate the record already bound to the token."""
        first = await service.create_session("sess-1")
        first.is_active = False
        await storage.save(first)

        second = await service.create_session("sess-1")

        assert second.id == first.id
        assert second.is_active is True

    async def test_resume_after_replace(self, service, storage):
        """Should resume a replaced token as the profile that replaced it."""
        existing = Student(session_id="old", name="Dana", email="dana@example.com")
        await storage.save(existing)
        await service.create_session("sess-1")
        replaced = await service.replace_existing_profile("sess-1", existing.id)

        resumed = await service.create_session("old")

        assert resumed.id == replaced.student.id
        assert resumed.session_id == "sess-1"
        assert resumed.is_active is True
        retired = await storage.find_by_id(existing.id)
        assert retired.is_active is False
        assert retired.replaced_by == replaced.student.id

    async def test_resume_after_merge(self, service, storage):
        """Should resume a merged session as the surviving profile."""
        existing = Student(session_id="old", name="Dana", email="dana@example.com")
        await storage.save(existing)
        session = await service.create_session("sess-1")
        await service.finalize_profile(
            "sess-1", ProfileSubmission(name="Dana Levi", email="dana@example.com")
        )

        resumed = await service.create_session("sess-1")

        assert resumed.id == existing.id
        assert resumed.is_active is True
        retired = await storage.find_by_id(session.id)
        assert retired.is_active is False
        assert retired.replaced_by == existing.id

    async def test_resume_without_live_successor(self, service, storage):
        """Should raise NotFoundError when the replacement chain has no active end."""
        successor = Student(session_id="b", is_active=False)
        retired = Student(session_id="a", is_active=False, replaced_by=successor.id)
        await storage.save_all([successor, retired])

        with pytest.raises(NotFoundError) as exc_info:
            await service.create_session("a")

        assert exc_info.value.record_id == retired.id
        assert (await storage.find_by_id(retired.id)).is_active is False

    async def test_create_session_requires_token(self, service):
        """Should reject an empty token."""
        with pytest.raises(ValidationError):
            await service.create_session("")

    async def test_unknown_session(self, service):
        """Should raise NotFoundError for unknown tokens."""
        with pytest.raises(NotFoundError):
            await service.get_by_session_id("nope")
        with pytest.raises(NotFoundError):
            await service.touch_session("nope")


class TestCVUpload:
    """Tests for process_cv_upload."""

    async def test_fills_basic_details(self, service, cv_file):
        """Should copy parsed contact details and attach the CV."""
        await service.create_session("sess-1")

        result = await service.process_cv_upload("sess-1", cv_file)

        assert result.requires_confirmation is False
        student = result.student
        assert student.name == "Dana Levi"
        assert student.email == "dana@example.com"
        assert student.phone == "050-123-4567"
        assert student.cv_file.filename == "dana_cv.pdf"
        assert student.chat_progress.current_step == 2

    async def test_duplicate_requires_confirmation(self, service, storage, cv_file):
        """Should stop and report an existing profile with the same email."""
        existing = Student(session_id="old", name="Dana", email="dana@example.com")
        await storage.save(existing)
        await service.create_session("sess-1")

        result = await service.process_cv_upload("sess-1", cv_file)

        assert result.requires_confirmation is True
        assert result.existing_user["id"] == existing.id
        assert result.message
        unchanged = await service.get_by_session_id("sess-1")
        assert unchanged.email is None
        assert unchanged.cv_file is None

    async def test_wrong_file_type(self, service, tmp_path):
        """Should reject files that are not CVs."""
        await service.create_session("sess-1")
        path = tmp_path / "photo.gif"
        path.write_bytes(b"GIF89a")

        with pytest.raises(ValidationError):
            await service.process_cv_upload("sess-1", path)

    async def test_invalid_parsed_values_skipped(self, storage, settings, cv_file):
        """Should ignore a malformed parsed email or phone."""
        service = IntakeSessionService(
            storage,
            settings,
            cv_parser=FakeCVParser(ParsedCV(name="Dana", email="broken", phone="123")),
        )
        await service.create_session("sess-1")

        result = await service.process_cv_upload("sess-1", cv_file)

        assert result.student.email is None
        assert result.student.phone == ""


class TestVerifyParsedData:
    """Tests for verify_parsed_data."""

    async def test_confirm_advances(self, service):
        """Should move to the education step."""
        await service.create_session("sess-1")
        student = await service.verify_parsed_data("sess-1", is_correct=True)
        assert student.chat_progress.current_step == 3

    async def test_corrections_applied(self, service):
        """Should apply corrected details."""
        await service.create_session("sess-1")

        student = await service.verify_parsed_data(
            "sess-1",
            name="Dana Cohen",
            email="Dana.Cohen@Example.com",
            phone="03-1234567",
            is_correct=False,
        )

        assert student.name == "Dana Cohen"
        assert student.email == "dana.cohen@example.com"
        assert student.phone == "03-123-4567"

    async def test_claimed_email_conflict(self, service, storage):
        """Should refuse an email owned by another active profile."""
        owner = Student(session_id="old", email="dana@example.com")
        await storage.save(owner)
        await service.create_session("sess-1")

        with pytest.raises(ConflictError) as exc_info:
            await service.verify_parsed_data("sess-1", email="dana@example.com", is_correct=False)
        assert exc_info.value.record_id == owner.id

    async def test_invalid_phone(self, service):
        """Should refuse a malformed phone and change nothing."""
        await service.create_session("sess-1")

        with pytest.raises(ValidationError):
            await service.verify_parsed_data(
                "sess-1", name="Dana", phone="12345", is_correct=False
            )
        assert (await service.get_by_session_id("sess-1")).name == ""


class TestFinalizeAndReplace:
    """Tests for delegation to the merge use case."""

    async def test_finalize(self, service):
        """Should complete the session profile."""
        await service.create_session("sess-1")

        result = await service.finalize_profile(
            "sess-1", ProfileSubmission(name="Dana", email="dana@example.com")
        )

        assert result.was_merged is False
        assert result.student.profile_complete is True

    async def test_replace(self, service, storage):
        """Should retire the existing profile."""
        existing = Student(session_id="old", name="Dana")
        await storage.save(existing)
        await service.create_session("sess-1")

        result = await service.replace_existing_profile("sess-1", existing.id)

        assert result.success is True
        assert result.student.name == "Dana"
        assert (await storage.find_by_id(existing.id)).is_active is False

    async def test_transcript_upload(self, service, tmp_path):
        """Should attach the transcript reference."""
        await service.create_session("sess-1")
        path = tmp_path / "grades.png"
        path.write_bytes(b"png")

        student = await service.process_transcript_upload("sess-1", path)

        assert student.education.transcript_file.filename == "grades.png"


class TestExpiry:
    """Tests for expire_stale_sessions."""

    async def test_expires_stale(self, service, storage):
        """Should deactivate sessions idle past the window."""
        old = datetime.now() - timedelta(hours=72)
        stale = Student(session_id="stale", created_at=old, last_accessed=old)
        await storage.save(stale)

        assert await service.expire_stale_sessions() == 1
        assert (await storage.find_by_id(stale.id)).is_active is False

    async def test_failures_swallowed(self, settings):
        """Should log and return 0 when the store fails."""
        storage = Mock()
        storage.deactivate_stale_sessions = AsyncMock(side_effect=StorageError("disk full"))
        service = IntakeSessionService(storage, settings)

        assert await service.expire_stale_sessions() == 0


class TestReadModels:
    """Tests for summaries, listings and statistics."""

    async def test_profile_summary(self, service):
        """Should hide internal fields and add completion data."""
        await service.create_session("sess-1")

        summary = await service.get_profile_summary("sess-1")

        assert "session_id" not in summary
        assert "replaced_by" not in summary
        assert summary["completion_percentage"] == 0
        assert summary["completion_tips"]

    async def test_validation_report(self, service):
        """Should report the missing categories."""
        await service.create_session("sess-1")
        report = await service.get_validation_report("sess-1")
        assert report["has_basic_info"] is False

    async def test_list_students_for_viewer(self, service, storage):
        """Should anonymize profiles and honour live grants."""
        await service.create_session("a")
        await service.create_session("b")
        first = await service.finalize_profile("a", ProfileSubmission(name="Dana"))
        await service.finalize_profile("b", ProfileSubmission(name="Noa"))
        await storage.save_exposure(
            Exposure("recruiter", first.student.id, expires_at=datetime.now() + timedelta(days=1))
        )

        anonymous = await service.list_students_for_viewer()
        granted = await service.list_students_for_viewer(viewer_id="recruiter")

        assert anonymous.total == 2
        assert anonymous.pages == 1
        assert {view.name for view in anonymous.students} == {"&*******&"}
        names = {view.id: view.name for view in granted.students}
        assert names[first.student.id] == "Dana"
        assert sorted(names.values()) == ["&*******&", "Dana"]

    async def test_list_students_with_filters(self, service):
        """Should apply browse filters to the page and its total."""
        await service.create_session("a")
        await service.create_session("b")
        await service.create_session("c")
        await service.finalize_profile("a", ProfileSubmission(name="Dana", gpa=92))
        await service.finalize_profile("b", ProfileSubmission(name="Noa", gpa=75))

        high = await service.list_students_for_viewer(filters=StudentFilter(gpa_min=90))
        drafts = await service.list_students_for_viewer(
            filters=StudentFilter.from_query({"completed": "false"})
        )
        everyone = await service.list_students_for_viewer(
            filters=StudentFilter.from_query({"completed": "all"}), limit=2
        )

        assert high.total == 1
        assert high.students[0].education["gpa"] == 92
        assert drafts.total == 1
        assert everyone.total == 3
        assert everyone.pages == 2
        assert len(everyone.students) == 2

    async def test_get_student_for_viewer(self, service, storage):
        """Should anonymize one profile unless the viewer holds a live grant."""
        await service.create_session("a")
        result = await service.finalize_profile("a", ProfileSubmission(name="Dana"))
        student_id = result.student.id
        await storage.save_exposure(
            Exposure("recruiter", student_id, expires_at=datetime.now() + timedelta(days=1))
        )

        anonymous = await service.get_student_for_viewer(student_id)
        expired = await service.get_student_for_viewer(student_id, viewer_id="other")
        granted = await service.get_student_for_viewer(student_id, viewer_id="recruiter")

        assert anonymous.name == "&*******&"
        assert anonymous.has_access is False
        assert expired.name == "&*******&"
        assert granted.name == "Dana"
        assert granted.has_access is True

    async def test_get_student_for_viewer_inactive(self, service, storage):
        """Should hide unknown and retired profiles from recruiters."""
        retired = Student(session_id="old", name="Dana", is_active=False)
        await storage.save(retired)

        with pytest.raises(NotFoundError):
            await service.get_student_for_viewer("missing")
        with pytest.raises(NotFoundError):
            await service.get_student_for_viewer(retired.id)
        assert (await service.get_student_by_id(retired.id)).name == "Dana"

    async def test_statistics(self, service):
        """Should count completed and in-progress profiles."""
        await service.create_session("a")
        await service.create_session("b")
        await service.finalize_profile("a", ProfileSubmission(name="Dana"))

        stats = await service.get_statistics()

        recent = stats.pop("recent_students")
        assert stats == {"total": 2, "completed": 1, "in_progress": 1, "completion_rate": 50}
        assert [entry["name"] for entry in recent] == ["", "Dana"]
        assert set(recent[0]) == {"id", "name", "email", "created_at"}

    async def test_statistics_recent_students_limit(self, service, storage):
        """Should list only the five newest active profiles."""
        start = datetime.now() - timedelta(hours=1)
        for i in range(7):
            created_at = start + timedelta(minutes=i)
            await storage.save(Student(session_id=f"s{i}", name=f"Student {i}", created_at=created_at))
        await storage.save(Student(session_id="gone", name="Gone", is_active=False))

        recent = (await service.get_statistics())["recent_students"]

        assert [entry["name"] for entry in recent] == [f"Student {i}" for i in (6, 5, 4, 3, 2)]
