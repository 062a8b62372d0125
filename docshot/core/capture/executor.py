"""
Capture Executor
================

Issue screenshot calls for one or more regions, strictly in order.

The single full-page path walks an ordered list of option variants and stops
at the first success: configured options, then without an explicit
``fromSurface: false``, then with ``captureBeyondViewport`` flipped.
"""

from typing import Any, List, Optional, Sequence
from dataclasses import dataclass, replace
import asyncio

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.capture import scripts
from docshot.core.capture.errors import CaptureFailed
from docshot.core.capture.session import CaptureSession
from docshot.models.schemas import CaptureRegion, CaptureRequest

logger = get_logger(__name__)


@dataclass(frozen=True)
class CaptureVariant:
    """Option set for one screenshot attempt."""

    capture_beyond_viewport: bool
    from_surface: Optional[bool] = None


def fallback_variants(capture_beyond_viewport: bool, from_surface: Optional[bool]) -> List[CaptureVariant]:
    """Ordered, de-duplicated attempts for the single full-page capture."""
    current = CaptureVariant(capture_beyond_viewport, from_surface)
    variants = [current]
    if from_surface is False:
        current = replace(current, from_surface=None)
        variants.append(current)
    variants.append(replace(current, capture_beyond_viewport=not current.capture_beyond_viewport))

    unique: List[CaptureVariant] = []
    for variant in variants:
        if variant not in unique:
            unique.append(variant)
    return unique


class CaptureExecutor:
    """Runs screenshot calls for one capture request."""

    def __init__(
        self,
        session: CaptureSession,
        request: CaptureRequest,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.request = request
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="capture_executor")  # structlog.BoundLoggerBase
        self.captures = 0

    async def _settle_between_captures(self) -> None:
        if self.captures > 0 and self.settings.capture_settle_delay_ms > 0:
            await asyncio.sleep(self.settings.capture_settle_delay_ms / 1000)

    async def _shoot(self, region: CaptureRegion, variant: CaptureVariant) -> bytes:
        data = await self.session.screenshot(
            region,
            image_type=self.request.image_type,
            quality=self.request.quality,
            omit_background=self.request.omit_background,
            capture_beyond_viewport=variant.capture_beyond_viewport,
            from_surface=variant.from_surface,
        )
        self.captures += 1
        return data

    async def capture(self, region: CaptureRegion) -> bytes:
        """
        Capture one region with the configured options.

        Raises:
            CaptureFailed: If the screenshot call fails
        """
        await self._settle_between_captures()
        variant = CaptureVariant(region.capture_beyond_viewport, self.request.from_surface)
        try:
            return await self._shoot(region, variant)
        except Exception as e:
            self.logger.error("Screenshot failed", clip=region.to_clip(), error=str(e))
            raise CaptureFailed(f"Screenshot failed: {e}") from e

    async def capture_sequence(
        self, regions: Sequence[CaptureRegion], scroll_to_region: bool = False
    ) -> List[bytes]:
        """
        Capture regions one after another in the given order.

        Args:
            regions: Regions top to bottom
            scroll_to_region: Scroll each region's top into the viewport first
                so viewport-relative lazy loaders fire

        Returns:
            One buffer per region
        """
        buffers: List[bytes] = []
        for index, region in enumerate(regions):
            if scroll_to_region:
                await self.session.evaluate(scripts.SCROLL_TO, region.y)
            buffers.append(await self.capture(region))
            self.logger.debug("Slice captured", index=index, total=len(regions), y=region.y)
        if scroll_to_region:
            await self.session.evaluate(scripts.SCROLL_TO, 0)
        return buffers

    async def capture_with_fallbacks(self, region: CaptureRegion) -> bytes:
        """
        Capture one region, retrying with each fallback variant.

        Raises:
            CaptureFailed: With the first attempt's message if every variant fails
        """
        await self._settle_between_captures()
        variants = fallback_variants(region.capture_beyond_viewport, self.request.from_surface)

        first_error: Optional[Exception] = None
        for attempt, variant in enumerate(variants, start=1):
            try:
                data = await self._shoot(region, variant)
                if attempt > 1:
                    self.logger.info(
                        "Screenshot recovered with fallback options",
                        attempt=attempt,
                        capture_beyond_viewport=variant.capture_beyond_viewport,
                        from_surface=variant.from_surface,
                    )
                return data
            except Exception as e:
                if first_error is None:
                    first_error = e
                self.logger.warning(
                    "Screenshot attempt failed",
                    attempt=attempt,
                    attempts=len(variants),
                    capture_beyond_viewport=variant.capture_beyond_viewport,
                    from_surface=variant.from_surface,
                    error=str(e),
                )

        raise CaptureFailed(f"Screenshot failed: {first_error}") from first_error
