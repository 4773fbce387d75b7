"""
Unit tests for IdentityResolver.
"""

from unittest.mock import AsyncMock, Mock

from src.application.use_cases import IdentityResolver
from src.domain.entities import Student


class TestResolveExisting:
    """Tests for resolve_existing."""

    async def test_no_conditions_skips_query(self):
        """Should not touch storage without email or phone."""
        storage = Mock()
        storage.find_one_active_matching = AsyncMock()
        resolver = IdentityResolver(storage)

        assert await resolver.resolve_existing() is None
        assert await resolver.resolve_existing(email="  ", phone="") is None
        storage.find_one_active_matching.assert_not_called()

    async def test_email_case_insensitive(self, storage):
        """Should find a profile regardless of email case."""
        student = Student(session_id="s1", email="dana@example.com")
        await storage.save(student)

        match = await IdentityResolver(storage).resolve_existing(email="Dana@EXAMPLE.com")
        assert match.id == student.id

    async def test_phone_match(self, storage):
        """Should find a profile by formatted phone."""
        student = Student(session_id="s1", phone="050-123-4567")
        await storage.save(student)

        match = await IdentityResolver(storage).resolve_existing(
            email="someone@else.com", phone="050-123-4567"
        )
        assert match.id == student.id

    async def test_excluded_record_not_returned(self, storage):
        """Should never return the excluded record."""
        student = Student(session_id="s1", email="dana@example.com")
        await storage.save(student)

        resolver = IdentityResolver(storage)
        assert await resolver.resolve_existing(
            email="dana@example.com", exclude_id=student.id
        ) is None

    async def test_inactive_ignored(self, storage):
        """Should ignore superseded profiles."""
        await storage.save(Student(session_id="s1", email="dana@example.com", is_active=False))

        assert await IdentityResolver(storage).resolve_existing(email="dana@example.com") is None
