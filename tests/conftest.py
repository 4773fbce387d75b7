"""
Shared test fixtures.
"""

import pytest

from src.config.settings import Settings
from src.infrastructure.storage import SQLiteAdapter


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Create test settings rooted in a temporary directory."""
    return Settings(data_dir=tmp_path, openai_api_key="")


@pytest.fixture
async def storage(tmp_path):
    """Initialized SQLite store in a temporary database."""
    adapter = SQLiteAdapter(tmp_path / "test.db")
    await adapter.initialize()
    yield adapter
    await adapter.close()
