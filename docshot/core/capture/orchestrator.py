"""
Capture Orchestrator
====================

Sequence one capture run: viewport, settle waits, scale clamping, then either
a selector mode, a viewport capture, or a full-page capture that may be split.
"""

from typing import Any, Dict, List, Optional, Tuple
import io

from PIL import Image  # type: ignore
from playwright.async_api import ElementHandle

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.capture import scripts
from docshot.core.capture.executor import CaptureExecutor
from docshot.core.capture.modes import CaptureModeStrategy
from docshot.core.capture.selector_resolver import SelectorResolver
from docshot.core.capture.session import CaptureSession
from docshot.core.capture.settle import DocumentSettler
from docshot.core.capture.split_planner import SplitPlanner
from docshot.core.capture.viewport_scaler import ViewportScaler
from docshot.models.schemas import CaptureRegion, CaptureRequest, CaptureResult, ElementBox

logger = get_logger(__name__)


class CaptureOrchestrator:
    """Runs capture requests against one session, one at a time."""

    def __init__(self, session: CaptureSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.settler = DocumentSettler(session, self.settings)
        self.resolver = SelectorResolver(session)
        self.scaler = ViewportScaler(session, self.settings)
        self.planner = SplitPlanner(session, self.settings)
        self.logger: Any = logger.bind(component="capture_orchestrator")  # structlog.BoundLoggerBase

    async def capture(self, request: CaptureRequest) -> CaptureResult:
        """
        Capture the session's document.

        Args:
            request: Normalized capture request

        Returns:
            CaptureResult with buffers ordered top-most first

        Raises:
            CaptureError: Subclass naming the stage that failed
        """
        viewport = request.viewport
        await self.session.set_viewport(
            viewport.width, viewport.height, viewport.device_scale_factor
        )

        await self.settler.settle(request)
        await self.settler.wait_for_live_render()

        executor = CaptureExecutor(self.session, request, self.settings)

        if request.has_selector:
            handles = await self.resolver.resolve(request.selector or [])
            await self.scaler.apply(
                request.max_pixel_width, await self._selection_width(handles, request.selector_padding)
            )
            strategy = CaptureModeStrategy(self.session, request, executor, self.settings)
            buffers = await strategy.capture(handles)
            regions = strategy.regions
        elif not request.full_page:
            await self.scaler.apply(request.max_pixel_width, viewport.width)
            await self.session.evaluate(scripts.SCROLL_TO, 0)
            region = CaptureRegion(
                x=0,
                y=0,
                width=self.session.viewport.width,
                height=self.session.viewport.height,
                capture_beyond_viewport=False,
            )
            buffers = [await executor.capture(region)]
            regions = [region]
        else:
            buffers, regions = await self._capture_full_page(request, executor)

        result = CaptureResult(
            buffers=buffers,
            image_type=request.image_type,
            device_scale_factor=self.session.device_scale_factor,
            regions=regions,
            dimensions=[self._image_dimensions(b) for b in buffers],
        )
        self.logger.info(
            "Capture completed",
            parts=len(result.buffers),
            selector=request.selector,
            mode=request.selector_mode.value if request.has_selector else None,
            device_scale_factor=result.device_scale_factor,
        )
        return result

    async def _selection_width(self, handles: List[ElementHandle], padding: float) -> float:
        boxes = [box for box in [await self.session.element_box(h) for h in handles] if box]
        if not boxes:
            return 0
        return ElementBox.union(boxes).width + 2 * padding

    async def _capture_full_page(
        self, request: CaptureRequest, executor: CaptureExecutor
    ) -> Tuple[List[bytes], List[CaptureRegion]]:
        document: Dict[str, float] = await self.session.evaluate(scripts.DOCUMENT_SIZE)
        await self.scaler.apply(request.max_pixel_width, document["width"])

        region = CaptureRegion(
            x=0,
            y=0,
            width=document["width"],
            height=document["height"],
            capture_beyond_viewport=request.effective_capture_beyond_viewport,
        )

        if self.planner.should_split(request.split, region.height):
            plan = await self.planner.plan(
                region, request.split_max_pixel_height, request.split_overlap_px
            )
            if plan.is_split:
                buffers = await executor.capture_sequence(plan.regions, scroll_to_region=True)
                return buffers, list(plan.regions)
            region = plan.regions[0]

        return [await executor.capture_with_fallbacks(region)], [region]

    def _image_dimensions(self, data: bytes) -> Optional[Tuple[int, int]]:
        try:
            with Image.open(io.BytesIO(data)) as image:
                return image.size
        except Exception as e:
            self.logger.debug("Could not read image dimensions", error=str(e))
            return None
