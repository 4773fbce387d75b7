"""
Intake Session Service - Drives the candidate chat from session start to
finalized profile, and serves anonymized profiles to recruiters.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from src.application.interfaces import StoragePort
from src.config.settings import Settings
from src.domain.entities import FileReference, Student
from src.domain.errors import ConflictError, NotFoundError, ValidationError
from src.domain.services import (
    build_anonymized_view,
    calculate_completion_score,
    get_completion_tips,
    get_validation_report,
)
from src.domain.services.contact_validation import (
    CV_EXTENSIONS,
    TRANSCRIPT_EXTENSIONS,
    clean_text_input,
    format_israeli_phone,
    is_valid_email,
    is_valid_israeli_phone,
    validate_upload,
)
from src.domain.value_objects import (
    DEGREE_LABELS,
    HOURS_LABELS,
    AnonymizedStudentView,
    LabelMapping,
    ProfileSubmission,
    StudentFilter,
)
from src.infrastructure.parsers import CVParsingService

from .identity_resolver import IdentityResolver
from .profile_merge import FinalizeResult, ProfileMergeUseCase, ReplaceResult


logger = logging.getLogger(__name__)


STEP_VERIFICATION = 2
STEP_EDUCATION = 3

RECENT_STUDENTS_LIMIT = 5


@dataclass
class CVUploadResult:
    """Outcome of processing an uploaded CV."""
    student: Student
    parsed_data: dict
    confidence: dict = field(default_factory=dict)
    requires_confirmation: bool = False
    existing_user: Optional[dict] = None
    message: str = ""


@dataclass
class StudentPage:
    """One page of recruiter-facing profiles."""
    students: list[AnonymizedStudentView]
    page: int
    pages: int
    total: int


class IntakeSessionService:
    """
    Application service behind the intake chat endpoints.

    Every method addresses a profile through its chat session token.
    """

    def __init__(
        self,
        storage: StoragePort,
        settings: Settings,
        cv_parser: Optional[CVParsingService] = None,
        degree_labels: LabelMapping = DEGREE_LABELS,
        hours_labels: LabelMapping = HOURS_LABELS,
    ) -> None:
        """
        Initialize the service.

        Args:
            storage: Student store.
            settings: Application settings.
            cv_parser: CV parsing service (required for CV uploads).
            degree_labels: Degree label table.
            hours_labels: Hours-per-week label table.
        """
        self.storage = storage
        self.settings = settings
        self.cv_parser = cv_parser
        self.resolver = IdentityResolver(storage)
        self.merge = ProfileMergeUseCase(
            storage,
            resolver=self.resolver,
            degree_labels=degree_labels,
            hours_labels=hours_labels,
        )

    # ==================== Session Lifecycle ====================

    async def create_session(
        self,
        session_id: str,
        initial: Optional[dict] = None,
    ) -> Student:
        """
        Resume the record bound to a session, or create an empty one.

        A record retired by a merge or replace resumes as the profile that
        superseded it. Only records that expired without a successor are
        reactivated in place.

        Raises:
            NotFoundError: If the token's record was superseded and no live
                successor remains.
        """
        if not session_id:
            raise ValidationError("Session ID is required", field="session_id")

        student = await self.storage.find_by_session_id(session_id)
        if student and student.replaced_by:
            successor = await self._live_successor(student)
            successor.last_accessed = datetime.now()
            await self.storage.save(successor)
            logger.info(f"Session {session_id} resumed as profile {successor.id}")
            return successor

        if student:
            student.is_active = True
            student.last_accessed = datetime.now()
            await self.storage.save(student)
            logger.info(f"Reactivated existing session: {session_id}")
            return student

        initial = initial or {}
        student = Student(
            session_id=session_id,
            name=initial.get("name", ""),
            email=initial.get("email"),
            phone=initial.get("phone", ""),
        )
        await self.storage.save(student)
        logger.info(f"Created new session: {session_id}")
        return student

    async def _live_successor(self, student: Student) -> Student:
        """Follow `replaced_by` links to the active profile at the end of the chain."""
        seen = {student.id}
        current = student
        while current.replaced_by:
            if current.replaced_by in seen:
                break
            seen.add(current.replaced_by)
            successor = await self.storage.find_by_id(current.replaced_by)
            if successor is None:
                break
            current = successor

        if current is student or not current.is_active or current.replaced_by:
            raise NotFoundError(
                "Session profile was superseded and no active successor exists",
                field="session_id",
                record_id=student.id,
            )
        return current

    async def get_by_session_id(
        self,
        session_id: str,
        active_only: bool = False,
    ) -> Student:
        """
        Raises:
            NotFoundError: If no record is bound to the session.
        """
        student = await self.storage.find_by_session_id(session_id, active_only=active_only)
        if not student:
            raise NotFoundError("Session not found", field="session_id")
        return student

    async def touch_session(self, session_id: str) -> Student:
        """Validate an active session and record the access."""
        student = await self.get_by_session_id(session_id, active_only=True)
        student.last_accessed = datetime.now()
        await self.storage.save(student)
        return student

    async def expire_stale_sessions(self) -> int:
        """
        Deactivate incomplete sessions idle past the expiry window.

        Best effort: failures are logged and 0 is returned.
        """
        cutoff = datetime.now() - timedelta(hours=self.settings.session_expiry_hours)
        try:
            expired = await self.storage.deactivate_stale_sessions(cutoff)
        except Exception as e:
            logger.error(f"Session cleanup error: {e}")
            return 0
        if expired:
            logger.info(f"Expired {expired} stale sessions")
        return expired

    # ==================== Chat Steps ====================

    async def process_cv_upload(self, session_id: str, file_path: Path) -> CVUploadResult:
        """
        Parse an uploaded CV and fill basic details.

        If the CV's email or phone belongs to another session's active
        profile, nothing is changed and the caller must confirm whether to
        replace that profile.

        Raises:
            NotFoundError: Unknown session.
            ValidationError: Wrong file type or size.
        """
        if not self.cv_parser:
            raise RuntimeError("CV parser not configured")

        student = await self.get_by_session_id(session_id, active_only=True)
        validate_upload(file_path, CV_EXTENSIONS, self.settings.max_upload_bytes)

        logger.info(f"Processing CV upload for session: {session_id}")
        parsed = await self.cv_parser.parse(file_path)

        email = parsed.email.lower() if parsed.email and is_valid_email(parsed.email) else None
        phone = None
        if parsed.phone:
            formatted = format_israeli_phone(parsed.phone)
            if is_valid_israeli_phone(formatted):
                phone = formatted

        existing = await self.resolver.resolve_existing(
            email=email,
            phone=phone,
            exclude_id=student.id,
        )
        if existing:
            logger.info(f"Found existing profile {existing.id} for uploaded CV")
            return CVUploadResult(
                student=student,
                parsed_data=parsed.to_dict(),
                confidence=dict(parsed.confidence),
                requires_confirmation=True,
                existing_user={
                    "id": existing.id,
                    "name": existing.name,
                    "email": existing.email,
                    "completion_percentage": calculate_completion_score(existing),
                },
                message=(
                    f"נמצא פרופיל קיים עבור {existing.name} ({existing.email}). "
                    "האם ברצונך לעדכן אותו או ליצור חדש?"
                ),
            )

        if parsed.name and parsed.name.strip():
            student.name = clean_text_input(parsed.name, 100)
        if email:
            student.set_email(email)
        if phone:
            student.phone = phone

        student.cv_file = FileReference(filename=file_path.name, path=str(file_path))
        student.chat_progress.current_step = STEP_VERIFICATION
        student.touch()
        await self.storage.save(student)

        logger.info(f"CV processed for student {student.id}")
        return CVUploadResult(
            student=student,
            parsed_data={"name": student.name, "email": student.email, "phone": student.phone},
            confidence=dict(parsed.confidence),
        )

    async def verify_parsed_data(
        self,
        session_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        is_correct: bool = True,
    ) -> Student:
        """
        Apply the candidate's corrections to the parsed details.

        Raises:
            ValidationError: Malformed email or phone (nothing is changed).
            ConflictError: Email belongs to another active profile.
        """
        student = await self.get_by_session_id(session_id, active_only=True)

        if not is_correct:
            new_email = None
            if email and email.strip():
                if not is_valid_email(email):
                    raise ValidationError("Invalid email address", field="email")
                new_email = email.strip().lower()
                owner = await self.resolver.resolve_existing(email=new_email, exclude_id=student.id)
                if owner:
                    raise ConflictError(
                        "האימייל הזה כבר קיים במערכת",
                        field="email",
                        record_id=owner.id,
                    )

            new_phone = None
            if phone and phone.strip():
                new_phone = format_israeli_phone(phone.strip())
                if not is_valid_israeli_phone(new_phone):
                    raise ValidationError("Invalid phone number", field="phone")

            if name and name.strip():
                student.name = clean_text_input(name, 100)
            if new_email:
                student.set_email(new_email)
            if new_phone:
                student.phone = new_phone

        student.chat_progress.current_step = STEP_EDUCATION
        student.touch()
        await self.storage.save(student)
        return student

    async def process_transcript_upload(self, session_id: str, file_path: Path) -> Student:
        """Attach a transcript file reference to the profile."""
        student = await self.get_by_session_id(session_id, active_only=True)
        validate_upload(file_path, TRANSCRIPT_EXTENSIONS, self.settings.max_upload_bytes)

        student.education.transcript_file = FileReference(
            filename=file_path.name,
            path=str(file_path),
        )
        student.touch()
        await self.storage.save(student)
        return student

    async def finalize_profile(
        self,
        session_id: str,
        submission: ProfileSubmission,
    ) -> FinalizeResult:
        """Commit the final answers, merging into an existing profile if needed."""
        student = await self.get_by_session_id(session_id, active_only=True)
        return await self.merge.finalize_with_merge(student, submission)

    async def replace_existing_profile(
        self,
        session_id: str,
        existing_id: str,
    ) -> ReplaceResult:
        """Keep the session profile and retire `existing_id`."""
        student = await self.get_by_session_id(session_id, active_only=True)
        return await self.merge.replace_with_session(student, existing_id)

    # ==================== Read Models ====================

    async def get_profile_summary(self, session_id: str) -> dict:
        """Sanitized profile for the candidate, with chat progress."""
        student = await self.get_by_session_id(session_id)
        data = student.to_dict()
        for private in ("session_id", "is_active", "replaced_by", "last_accessed"):
            data.pop(private, None)
        data["completion_percentage"] = calculate_completion_score(student)
        data["completion_tips"] = get_completion_tips(student)
        return data

    async def get_validation_report(self, session_id: str) -> dict:
        """Which parts of the profile are filled in."""
        student = await self.get_by_session_id(session_id)
        report = get_validation_report(student)
        logger.debug(f"Validation report for student {student.id}: {report}")
        return report

    async def list_students_for_viewer(
        self,
        viewer_id: Optional[str] = None,
        filters: Optional[StudentFilter] = None,
        page: int = 1,
        limit: int = 20,
    ) -> StudentPage:
        """
        Anonymized profiles for a recruiter, with exposure grants applied.

        Args:
            viewer_id: Recruiter whose live grants restore real names.
            filters: Browse filters; defaults to completed profiles only.
            page: 1-based page number.
            limit: Page size.
        """
        filters = filters or StudentFilter()
        page = max(page, 1)
        students = await self.storage.list_active(
            filters,
            limit=limit,
            offset=(page - 1) * limit,
        )
        total = await self.storage.count_active(filters)

        granted = await self._granted_ids(viewer_id)
        views = [self._view(student, granted) for student in students]
        return StudentPage(
            students=views,
            page=page,
            pages=-(-total // limit) if limit else 0,
            total=total,
        )

    async def get_student_for_viewer(
        self,
        student_id: str,
        viewer_id: Optional[str] = None,
    ) -> AnonymizedStudentView:
        """
        One anonymized profile for a recruiter.

        Raises:
            NotFoundError: If no active profile has this id.
        """
        student = await self.storage.find_by_id(student_id)
        if not student or not student.is_active:
            raise NotFoundError("Student not found", record_id=student_id)
        return self._view(student, await self._granted_ids(viewer_id))

    async def get_student_by_id(self, student_id: str) -> Student:
        """
        Full record for trusted callers, active or not.

        Raises:
            NotFoundError: If no record has this id.
        """
        student = await self.storage.find_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found", record_id=student_id)
        return student

    async def _granted_ids(self, viewer_id: Optional[str]) -> set[str]:
        if not viewer_id:
            return set()
        return await self.storage.get_live_exposure_ids(viewer_id)

    def _view(self, student: Student, granted: set[str]) -> AnonymizedStudentView:
        return build_anonymized_view(
            student,
            granted,
            placeholder=self.settings.anonymized_name_placeholder,
        )

    async def get_statistics(self) -> dict:
        """Totals of active profiles and the newest ones."""
        total = await self.storage.count_active()
        completed = await self.storage.count_active(StudentFilter(completed=True))
        recent = await self.storage.list_active(limit=RECENT_STUDENTS_LIMIT)
        return {
            "total": total,
            "completed": completed,
            "in_progress": total - completed,
            "completion_rate": round(completed / total * 100) if total else 0,
            "recent_students": [
                {
                    "id": student.id,
                    "name": student.name,
                    "email": student.email,
                    "created_at": student.created_at.isoformat(),
                }
                for student in recent
            ],
        }
