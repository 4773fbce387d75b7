"""
Storage Port - Abstract interface for student and exposure persistence.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Mapping, Optional, Sequence

from src.domain.entities import Exposure, Student
from src.domain.value_objects import StudentFilter


class StoragePort(ABC):
    """Abstract interface for data storage."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize storage connection."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close storage connection."""
        pass

    # Students
    @abstractmethod
    async def find_by_id(self, student_id: str) -> Optional[Student]:
        """Get a student by record id."""
        pass

    @abstractmethod
    async def find_by_session_id(
        self,
        session_id: str,
        active_only: bool = False,
    ) -> Optional[Student]:
        """Get the student bound to a chat session."""
        pass

    @abstractmethod
    async def find_one_active_matching(
        self,
        conditions: Mapping[str, str],
        exclude_id: Optional[str] = None,
    ) -> Optional[Student]:
        """
        First active student matching ANY of the column=value conditions.

        Results follow insertion order so the same query returns the same record.
        """
        pass

    @abstractmethod
    async def save(self, student: Student) -> None:
        """Insert or update a student."""
        pass

    @abstractmethod
    async def save_all(self, students: Sequence[Student]) -> None:
        """Insert or update several students in one transaction, in order."""
        pass

    @abstractmethod
    async def deactivate_stale_sessions(self, cutoff: datetime) -> int:
        """Deactivate incomplete sessions created and last accessed before cutoff."""
        pass

    @abstractmethod
    async def list_active(
        self,
        filters: Optional[StudentFilter] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Student]:
        """Active students matching filters (None: all), newest first."""
        pass

    @abstractmethod
    async def count_active(self, filters: Optional[StudentFilter] = None) -> int:
        """Count active students matching filters (None: all)."""
        pass

    # Exposures
    @abstractmethod
    async def save_exposure(self, exposure: Exposure) -> int:
        """Save an exposure grant."""
        pass

    @abstractmethod
    async def get_live_exposure_ids(
        self,
        viewer_id: str,
        now: Optional[datetime] = None,
    ) -> set[str]:
        """Student ids the viewer holds an active, unexpired grant for."""
        pass
