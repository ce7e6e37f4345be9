"""
Test Configuration and Fixtures

Architecture:
- Unit tests (test/**/unit/): in-memory adapters and AsyncMock collaborators
- Integration tests (test/**/integration/): FastAPI TestClient over the wired
  container, SQLite (aiosqlite) for the SQL inventory repository
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read at import time (src.platform.config.core_setting)
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['INVENTORY_BACKEND'] = 'memory'
    os.environ['DEBUG'] = 'false'
    # Keep the application ping out of websocket conversations under test
    os.environ['WEBSOCKET_PING_INTERVAL'] = '3600'
    os.environ['OTEL_CONSOLE_EXPORT'] = 'false'
    os.environ['INTERNAL_CONNECTION_TOKEN'] = 'test-internal-token'


_early_setup_test_environment()

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402

from src.platform.config.di import container  # noqa: E402


@pytest.fixture(autouse=True)
def reset_container() -> Generator[None, None, None]:
    """Fresh singletons (registry, broadcaster, locks, inventory) per test."""
    container.reset_singletons()
    yield
    container.reset_singletons()
