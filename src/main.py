"""
Candidate Intake - Student profile core for the recruitment chat

Entry point for maintenance runs (session expiry sweep).
"""

import asyncio
import logging
import sys

from src.application.interfaces import StoragePort
from src.application.use_cases import IntakeSessionService
from src.config.settings import Settings, get_settings
from src.infrastructure.ai import OpenAIAdapter
from src.infrastructure.parsers import CVParsingService
from src.infrastructure.storage import SQLiteAdapter


logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def build_service(settings: Settings, storage: StoragePort) -> IntakeSessionService:
    """Wire the intake service; AI CV refinement only when an API key is set."""
    ai = None
    if settings.ai_enabled:
        ai = OpenAIAdapter(settings)
        ai.initialize()
    cv_parser = CVParsingService(settings, ai=ai)
    return IntakeSessionService(storage, settings, cv_parser=cv_parser)


async def run_maintenance(settings: Settings) -> dict:
    """
    Expire stale chat sessions and report profile totals.

    Returns:
        Statistics dict with the number of expired sessions added.
    """
    storage = SQLiteAdapter(settings.database_path)
    await storage.initialize()
    try:
        service = build_service(settings, storage)
        expired = await service.expire_stale_sessions()
        stats = await service.get_statistics()
    finally:
        await storage.close()

    stats["expired"] = expired
    logger.info(
        f"Maintenance done: expired={expired}, total={stats['total']}, "
        f"completed={stats['completed']}, rate={stats['completion_rate']}%"
    )
    return stats


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    asyncio.run(run_maintenance(settings))


if __name__ == "__main__":
    main()
