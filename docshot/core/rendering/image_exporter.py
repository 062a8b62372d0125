"""
Image Exporter
==============

Playwright-based export of HTML + CSS documents to one or more images.
Manages browser instances and the page lifecycle around the capture engine.
"""

from typing import Optional, List, Any, AsyncGenerator, Union
import asyncio
import time
from contextlib import asynccontextmanager
from pathlib import Path

from playwright.async_api import async_playwright, Browser

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.capture.errors import CaptureError
from docshot.core.capture.orchestrator import CaptureOrchestrator
from docshot.core.capture.session import CaptureSession
from docshot.core.rendering.page_builder import DocumentBuilder
from docshot.models.schemas import CaptureRequest, CaptureResult

logger = get_logger(__name__)


class ImageExportError(Exception):
    """Exception raised when image export fails outside the capture engine."""

    pass


class BrowserPool:
    """Browser instance pool for efficient resource management."""

    def __init__(self, pool_size: int = 2, settings: Optional[Settings] = None):
        self.pool_size = pool_size
        self.browsers: List[Browser] = []
        self._semaphore = asyncio.Semaphore(pool_size)
        self._playwright = None
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="browser_pool")  # structlog.BoundLoggerBase

    async def initialize(self) -> None:
        """Initialize browser pool."""
        try:
            self._playwright = await async_playwright().start()

            for _ in range(self.pool_size):
                browser = await self._playwright.chromium.launch(
                    headless=self.settings.playwright_headless,
                    args=self.settings.browser_args,
                )
                self.browsers.append(browser)

            self.logger.info("Browser pool initialized", pool_size=self.pool_size)
        except Exception as e:
            self.logger.error("Failed to initialize browser pool", error=str(e))
            raise ImageExportError(f"Browser pool initialization failed: {e}") from e

    async def close(self) -> None:
        """Close all browsers in the pool."""
        for browser in self.browsers:
            await browser.close()
        self.browsers = []

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        self.logger.info("Browser pool closed")

    @asynccontextmanager
    async def get_browser(self) -> AsyncGenerator[Browser, None]:
        """Get a browser instance from the pool."""
        async with self._semaphore:
            if not self.browsers:
                raise ImageExportError("Browser pool not initialized")

            browser = self.browsers.pop()
            try:
                yield browser
            finally:
                self.browsers.append(browser)


class ImageExporter:
    """Loads documents into fresh pages and captures them."""

    def __init__(
        self,
        browser_pool: Optional[BrowserPool] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="image_exporter")  # structlog.BoundLoggerBase
        self.builder = DocumentBuilder(self.settings)
        self.browser_pool = browser_pool
        self._own_pool = browser_pool is None

        if self._own_pool:
            self.browser_pool = BrowserPool(self.settings.browser_pool_size, self.settings)

    async def initialize(self) -> None:
        """Initialize the exporter."""
        if self._own_pool and self.browser_pool:
            await self.browser_pool.initialize()
        self.logger.info("Image exporter initialized")

    async def close(self) -> None:
        """Close the exporter."""
        if self._own_pool and self.browser_pool:
            await self.browser_pool.close()
        self.logger.info("Image exporter closed")

    async def export(
        self,
        html: str,
        css: str = "",
        request: Optional[CaptureRequest] = None,
        base_path: Optional[Union[str, Path]] = None,
    ) -> CaptureResult:
        """
        Export an HTML fragment to images.

        Args:
            html: Rendered HTML fragment
            css: Stylesheet text
            request: Capture request, defaults apply when omitted
            base_path: Directory that relative resources resolve against

        Returns:
            CaptureResult with one or more buffers

        Raises:
            CaptureError: If the capture engine fails
            ImageExportError: If the browser or page cannot be prepared
        """
        request = request or CaptureRequest()
        if not self.browser_pool:
            raise ImageExportError("Browser pool not available")

        base_dir = Path(base_path).resolve() if base_path is not None else None
        document = self.builder.build(
            html, css, base_href=base_dir.as_uri() + "/" if base_dir else None
        )

        self.logger.info(
            "Exporting document to images",
            html_length=len(html),
            image_type=request.image_type,
            selector=request.selector,
        )

        try:
            async with self.browser_pool.get_browser() as browser:
                context = await browser.new_context(no_viewport=True)
                temp_file: Optional[Path] = None
                try:
                    page = await context.new_page()
                    page.set_default_timeout(self.settings.playwright_timeout)
                    session = await CaptureSession.attach(page, request.viewport)
                    try:
                        if base_dir is not None:
                            # file:// resources only resolve for documents loaded from disk
                            temp_file = base_dir / f"__docshot_{time.time_ns()}.html"
                            temp_file.write_text(document, encoding="utf-8")
                            await page.goto(temp_file.as_uri(), wait_until="load")
                        else:
                            await page.set_content(document, wait_until="load")

                        return await CaptureOrchestrator(session, self.settings).capture(request)
                    finally:
                        await session.detach()
                finally:
                    await context.close()
                    if temp_file is not None:
                        try:
                            temp_file.unlink()
                        except OSError as e:
                            self.logger.warning(
                                "Failed to remove temporary document", path=str(temp_file), error=str(e)
                            )
        except (CaptureError, ImageExportError):
            raise
        except Exception as e:
            self.logger.error("Image export error", error=str(e))
            raise ImageExportError(f"Image export failed: {e}") from e


# Global browser pool instance
_global_browser_pool: Optional[BrowserPool] = None
_pool_lock = asyncio.Lock()


async def initialize_browser_pool() -> None:
    """Initialize global browser pool once, even under concurrent first use."""
    global _global_browser_pool
    async with _pool_lock:
        if _global_browser_pool is not None:
            return
        settings = get_settings()
        pool = BrowserPool(settings.browser_pool_size, settings)
        await pool.initialize()
        _global_browser_pool = pool


async def close_browser_pool() -> None:
    """Close global browser pool."""
    global _global_browser_pool
    if _global_browser_pool:
        await _global_browser_pool.close()
        _global_browser_pool = None


async def export_images(
    html: str,
    css: str = "",
    request: Optional[CaptureRequest] = None,
    base_path: Optional[Union[str, Path]] = None,
) -> CaptureResult:
    """
    Export an HTML fragment using the process-wide browser pool.

    The pool is initialized on first use.
    """
    if not _global_browser_pool:
        logger.info("Auto-initializing browser pool for image export")
        await initialize_browser_pool()

    exporter = ImageExporter(_global_browser_pool)
    return await exporter.export(html, css, request, base_path)
