"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides test settings, fake sessions and a real browser for integration tests.
"""

import shutil
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio

from docshot.config.settings import Settings
from docshot.core.rendering.image_exporter import BrowserPool, ImageExporter

from tests.utils.helpers import make_spaced_document
from tests.utils.mocks import FakeCaptureSession


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    browser_pool_size: int = 1
    playwright_headless: bool = True
    log_level: str = "DEBUG"
    capture_settle_delay_ms: int = 0
    asset_wait_timeout_ms: int = 1000
    live_render_timeout_ms: int = 200


@pytest.fixture(scope="session")
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp(prefix="docshot_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def fake_session() -> FakeCaptureSession:
    """Empty 800x2000 fake document with an 800x600 viewport at scale 1."""
    return FakeCaptureSession()


@pytest.fixture
def spaced_session() -> FakeCaptureSession:
    """Fake document with #a and #c separated by a 2000px spacer."""
    return make_spaced_document()


@pytest_asyncio.fixture
async def exporter(test_settings: TestSettings) -> AsyncGenerator[ImageExporter, None]:
    """Image exporter backed by a real Chromium; skips when none can launch."""
    pool = BrowserPool(pool_size=1, settings=test_settings)
    try:
        await pool.initialize()
    except Exception as e:
        await pool.close()
        pytest.skip(f"Chromium not available: {e}")
    exporter = ImageExporter(pool, test_settings)
    yield exporter
    await pool.close()
