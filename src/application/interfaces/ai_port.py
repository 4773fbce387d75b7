"""
AI Port - Abstract interface for AI-assisted CV reading.
"""

from abc import ABC, abstractmethod
from typing import Optional


class AIPort(ABC):
    """Abstract interface for AI operations."""

    @abstractmethod
    def initialize(self) -> None:
        """Initialize the AI service."""
        pass

    @abstractmethod
    async def extract_contact_details(self, cv_text: str) -> dict[str, Optional[str]]:
        """Read name/email/phone from CV text. Missing values are None."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if AI service is available."""
        pass
