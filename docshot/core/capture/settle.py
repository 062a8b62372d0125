"""
Document Settler
================

Bounded waits before measuring or capturing: fonts and images, an optional
scroll pass that triggers lazy loaders, and the live render done signal.
Every wait degrades to proceeding anyway when its bound is hit.
"""

from typing import Any, Optional
import asyncio

from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.capture import scripts
from docshot.core.capture.session import CaptureSession
from docshot.models.schemas import CaptureRequest, ScrollOptions

logger = get_logger(__name__)


class DocumentSettler:
    """Waits for the session's document to reach a stable layout."""

    def __init__(self, session: CaptureSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="document_settler")  # structlog.BoundLoggerBase

    async def settle(self, request: CaptureRequest) -> None:
        """Wait for assets and, when enabled, scroll through the document once."""
        await self.wait_for_assets()
        if request.effective_scroll_to_load:
            await self.scroll_to_load(request.scroll)
            await self.wait_for_assets()

    async def wait_for_assets(self) -> bool:
        """
        Wait for fonts and pending images.

        Returns:
            True if everything loaded within the bound
        """
        timeout_ms = self.settings.asset_wait_timeout_ms
        try:
            loaded = await asyncio.wait_for(
                self.session.evaluate(scripts.WAIT_FOR_ASSETS, timeout_ms),
                timeout=timeout_ms / 1000 + 1,
            )
        except (asyncio.TimeoutError, PlaywrightError) as e:
            self.logger.warning("Asset wait did not complete", timeout_ms=timeout_ms, error=str(e))
            return False

        if not loaded:
            self.logger.warning("Assets still loading after timeout", timeout_ms=timeout_ms)
        return bool(loaded)

    async def scroll_to_load(self, options: ScrollOptions) -> int:
        """
        Scroll top to bottom in steps so lazy content loads, then back to the top.

        Stops at the step or time budget, at the bottom, or after two
        consecutive steps without progress.

        Args:
            options: Step size, delay and bounds

        Returns:
            Number of steps taken
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + options.max_time_ms / 1000
        last_y: Optional[float] = None
        stalled = 0
        steps = 0

        while steps < options.max_steps and loop.time() < deadline:
            state = await self.session.evaluate(scripts.SCROLL_STEP, options.step_px)
            steps += 1
            y = float(state["y"])
            if options.delay_ms > 0:
                await asyncio.sleep(options.delay_ms / 1000)

            if y >= float(state["maxY"]):
                break
            if last_y is not None and y <= last_y:
                stalled += 1
                if stalled >= 2:
                    break
            else:
                stalled = 0
            last_y = y

        await self.session.evaluate(scripts.SCROLL_TO, 0)
        self.logger.debug("Scroll to load finished", steps=steps)
        return steps

    async def wait_for_live_render(self) -> bool:
        """
        Wait for the live render done flag when the document declares one.

        Returns:
            False only when the wait timed out
        """
        flag = self.settings.live_done_flag
        pending = await self.session.evaluate(scripts.LIVE_RENDER_PENDING, flag)
        if not pending:
            return True

        timeout_ms = self.settings.live_render_timeout_ms
        try:
            await self.session.wait_for_function(scripts.LIVE_RENDER_DONE, flag, timeout_ms)
        except PlaywrightTimeoutError:
            self.logger.warning("Live render did not finish, capturing anyway", timeout_ms=timeout_ms)
            return False
        return True
