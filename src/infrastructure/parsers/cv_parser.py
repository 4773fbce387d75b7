"""
CV Parsing Service - Best-effort contact extraction from an uploaded CV.

Regex heuristics run first; when their confidence is low and an AI
adapter is configured, the model fills in whatever the heuristics missed.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from src.application.interfaces import AIPort
from src.config.settings import Settings
from .resume_parser import ParsedCV, ResumeParser


logger = logging.getLogger(__name__)


class CVParsingService:
    """Reads name, email and phone from CV files."""

    AI_CONFIDENCE = 0.7

    def __init__(self, settings: Settings, ai: Optional[AIPort] = None) -> None:
        """
        Initialize the service.

        Args:
            settings: Application settings (confidence threshold).
            ai: Optional AI adapter used when heuristics are unsure.
        """
        self.settings = settings
        self.ai = ai

    async def parse(self, file_path: Path) -> ParsedCV:
        """
        Parse a CV file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the file type is not supported.
        """
        text = await asyncio.to_thread(ResumeParser.extract_text, file_path)
        parsed = ResumeParser.extract_contact_info(text)
        logger.info(
            f"Parsed CV {file_path.name}: confidence={parsed.overall_confidence:.2f}"
        )

        if self.ai and parsed.overall_confidence < self.settings.cv_ai_confidence_threshold:
            await self._refine_with_ai(parsed)

        return parsed

    async def _refine_with_ai(self, parsed: ParsedCV) -> None:
        """Fill fields the heuristics missed from the AI answer."""
        try:
            details = await self.ai.extract_contact_details(parsed.text)
        except Exception as e:
            logger.warning(f"AI contact extraction failed, keeping heuristics: {e}")
            return

        for key in ("name", "email", "phone"):
            value = details.get(key)
            if value and not getattr(parsed, key):
                setattr(parsed, key, value.strip().lower() if key == "email" else value.strip())
                parsed.confidence[key] = self.AI_CONFIDENCE
