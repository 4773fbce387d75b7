"""
Profile Merge Use Case - Reconcile a chat session profile with an existing one.

Two entry points:
- finalize_with_merge: the session's final answers are authoritative. If
  another active profile already owns the submitted email, the answers
  (and the session's uploaded files) are written into that profile and the
  session record is superseded by it.
- replace_with_session: the session record is kept and only backfilled
  (name, email, phone) from a previously discovered profile, which is then
  superseded by the session record.

Both paths write the two records in a single transaction. The caller's
session object is never modified; results carry the updated copies.
"""

import copy
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from src.application.interfaces import StoragePort
from src.domain.entities import Student
from src.domain.errors import ConflictError, NotFoundError, ValidationError
from src.domain.services.contact_validation import (
    clean_text_input,
    format_israeli_phone,
    is_valid_email,
    is_valid_israeli_phone,
)
from src.domain.value_objects import (
    DEGREE_LABELS,
    HOURS_LABELS,
    LabelMapping,
    NONE_ANSWER,
    ProfileSubmission,
    parse_gpa,
)

from .identity_resolver import IdentityResolver


logger = logging.getLogger(__name__)


FieldApplier = Callable[[Student, Any], None]

BACKFILL_FIELDS = ("name", "email", "phone")

NAME_MAX_LENGTH = 100


@dataclass
class FinalizeResult:
    """Outcome of finalizing a profile."""
    student: Student
    was_merged: bool


@dataclass
class ReplaceResult:
    """Outcome of replacing an existing profile with the session profile."""
    success: bool
    student: Student
    message: str = ""


class ProfileMergeUseCase:
    """
    Use case for committing chat answers and resolving duplicate profiles.
    """

    def __init__(
        self,
        storage: StoragePort,
        resolver: Optional[IdentityResolver] = None,
        degree_labels: LabelMapping = DEGREE_LABELS,
        hours_labels: LabelMapping = HOURS_LABELS,
    ) -> None:
        """
        Initialize the use case.

        Args:
            storage: Student store.
            resolver: Identity resolver (built on storage if omitted).
            degree_labels: Degree label table.
            hours_labels: Hours-per-week label table.
        """
        self.storage = storage
        self.resolver = resolver or IdentityResolver(storage)
        self.degree_labels = degree_labels
        self.hours_labels = hours_labels
        self._appliers = self._field_appliers()

    def _field_appliers(self) -> dict[str, FieldApplier]:
        """One applier per ProfileSubmission attribute."""

        def set_experience(student: Student, text: Any) -> None:
            student.work_experience.has_experience = text != NONE_ANSWER
            student.work_experience.description = text

        def set_links(student: Student, text: Any) -> None:
            url = str(text).strip()
            if url and url != NONE_ANSWER:
                student.links.assign(url)

        return {
            "name": lambda s, v: setattr(s, "name", clean_text_input(v, NAME_MAX_LENGTH)),
            "email": lambda s, v: s.set_email(v),
            "phone": lambda s, v: setattr(s, "phone", format_israeli_phone(v)),
            "institution": lambda s, v: setattr(s.education, "institution", v),
            "major": lambda s, v: setattr(s.education, "degree_field", v),
            "degree_type": lambda s, v: setattr(
                s.education, "current_degree", self.degree_labels.resolve(v)
            ),
            "year": lambda s, v: setattr(s.education, "study_year", str(v)),
            "gpa": lambda s, v: setattr(s.education, "gpa", parse_gpa(v)),
            "experience": set_experience,
            "location": lambda s, v: setattr(s.location, "city", v),
            "hours": lambda s, v: setattr(
                s.availability, "hours_per_week", self.hours_labels.resolve(v)
            ),
            "soft_skills": lambda s, v: setattr(s, "soft_skills", v),
            "key_info": lambda s, v: setattr(s, "key_info", v),
            "special_roles": lambda s, v: setattr(s, "special_roles", v),
            "personal_statement": lambda s, v: setattr(s, "personal_statement", v),
            "additional_info": lambda s, v: setattr(s, "additional_info", v),
            "links": set_links,
        }

    @staticmethod
    def validate_submission(submission: ProfileSubmission) -> None:
        """
        Reject malformed contact details before anything is mutated.

        Raises:
            ValidationError: On an invalid email or phone.
        """
        if submission.email is not None and not is_valid_email(submission.email):
            raise ValidationError("Invalid email address", field="email")
        if submission.phone and not is_valid_israeli_phone(submission.phone):
            raise ValidationError("Invalid phone number", field="phone")

    def apply_submission(self, student: Student, submission: ProfileSubmission) -> None:
        """Write every supplied answer into the student record."""
        for attribute, value in submission.supplied():
            self._appliers[attribute](student, value)

    @staticmethod
    def _mark_complete(student: Student, now: datetime) -> None:
        student.profile_complete = True
        student.terms_accepted = True
        student.terms_accepted_date = student.terms_accepted_date or now
        student.chat_progress.completed = True
        student.last_updated = now

    async def finalize_with_merge(
        self,
        student: Student,
        submission: ProfileSubmission,
    ) -> FinalizeResult:
        """
        Commit the chat's final answers.

        Args:
            student: Session profile.
            submission: Final answers, including the candidate's email.

        Returns:
            FinalizeResult with the canonical profile.

        Raises:
            ValidationError: On malformed email/phone (nothing is changed).
        """
        self.validate_submission(submission)
        now = datetime.now()

        existing = None
        if submission.normalized_email:
            existing = await self.resolver.resolve_existing(
                email=submission.normalized_email,
                exclude_id=student.id,
            )

        if existing:
            logger.info(
                f"Email already exists. Merging session {student.session_id} "
                f"into existing profile {existing.id}"
            )
            self.apply_submission(existing, submission)

            # Session uploads are the freshest
            if student.cv_file and student.cv_file.filename:
                existing.cv_file = copy.deepcopy(student.cv_file)
            transcript = student.education.transcript_file
            if transcript and transcript.filename:
                existing.education.transcript_file = copy.deepcopy(transcript)

            self._mark_complete(existing, now)
            retired = copy.deepcopy(student)
            retired.supersede(existing.id)

            await self.storage.save_all([existing, retired])
            logger.info(f"Merged session profile {student.id} into {existing.id}")
            return FinalizeResult(student=existing, was_merged=True)

        finalized = copy.deepcopy(student)
        self.apply_submission(finalized, submission)
        self._mark_complete(finalized, now)
        await self.storage.save(finalized)
        logger.info(f"Student profile finalized: {finalized.id}")
        return FinalizeResult(student=finalized, was_merged=False)

    async def replace_with_session(
        self,
        student: Student,
        existing_id: str,
    ) -> ReplaceResult:
        """
        Keep the session profile and retire a previously found profile.

        Missing name/email/phone on the session profile are copied from the
        existing one; values it already has are kept.

        Raises:
            NotFoundError: If the existing profile does not exist.
            ConflictError: If the session profile is no longer active.
        """
        existing = await self.storage.find_by_id(existing_id)
        if not existing:
            raise NotFoundError("Existing profile not found", record_id=existing_id)
        if existing.id == student.id:
            raise ValidationError("A profile cannot replace itself", record_id=student.id)
        if not student.is_active:
            raise ConflictError("Session profile is no longer active", record_id=student.id)

        logger.info(f"Replacing existing profile {existing.id} with session {student.session_id}")

        kept = copy.deepcopy(student)
        for field_name in BACKFILL_FIELDS:
            if not getattr(kept, field_name) and getattr(existing, field_name):
                setattr(kept, field_name, getattr(existing, field_name))

        existing.supersede(kept.id)
        kept.touch()

        # Retire the old record first so its email is free for the session record
        await self.storage.save_all([existing, kept])

        logger.info("Profile replacement completed")
        return ReplaceResult(
            success=True,
            student=kept,
            message="הפרופיל הישן הוחלף בהצלחה. ממשיכים עם הפרופיל החדש.",
        )
