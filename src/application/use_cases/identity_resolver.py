"""
Identity Resolver - Find an existing active profile by email or phone.
"""

import logging
from typing import Optional

from src.application.interfaces import StoragePort
from src.domain.entities import Student


logger = logging.getLogger(__name__)


class IdentityResolver:
    """
    Looks up at most one active student matching an email OR a phone.

    Email matching is case-insensitive (emails are stored case-folded);
    phones are compared exactly and must already be formatted.
    """

    def __init__(self, storage: StoragePort) -> None:
        self.storage = storage

    async def resolve_existing(
        self,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> Optional[Student]:
        """
        Find an active student matching either contact detail.

        Args:
            email: Email to match (any case).
            phone: Formatted phone to match.
            exclude_id: Record id that must not be returned.

        Returns:
            The first matching student, or None. Without email and phone
            nothing is queried.
        """
        conditions: dict[str, str] = {}
        if email and email.strip():
            conditions["email"] = email.strip().lower()
        if phone and phone.strip():
            conditions["phone"] = phone.strip()

        if not conditions:
            return None

        match = await self.storage.find_one_active_matching(conditions, exclude_id=exclude_id)
        if match:
            logger.debug(f"Resolved existing profile {match.id} by {sorted(conditions)}")
        return match
