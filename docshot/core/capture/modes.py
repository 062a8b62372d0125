"""
Capture Modes
=============

Selector capture modes built on resolved top-level element handles:

- first: the first match only
- each: one image per match, unmeasurable matches skipped
- union: one rectangle covering every match, including content in between
- stitch: matches relocated into one vertical container, nothing in between
"""

from typing import Any, Dict, List, Optional

from playwright.async_api import ElementHandle

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.capture import scripts
from docshot.core.capture.dom_stitcher import DomStitcher
from docshot.core.capture.errors import BoundingBoxUnavailable
from docshot.core.capture.executor import CaptureExecutor
from docshot.core.capture.session import CaptureSession
from docshot.core.capture.split_planner import SplitPlanner
from docshot.models.schemas import CaptureRegion, CaptureRequest, ElementBox, SelectorMode

logger = get_logger(__name__)


class CaptureModeStrategy:
    """Captures a selection according to the request's selector mode."""

    def __init__(
        self,
        session: CaptureSession,
        request: CaptureRequest,
        executor: CaptureExecutor,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.request = request
        self.executor = executor
        self.settings = settings or get_settings()
        self.stitcher = DomStitcher(session, self.settings)
        self.planner = SplitPlanner(session, self.settings)
        self.regions: List[CaptureRegion] = []
        self.logger: Any = logger.bind(
            component="capture_modes", mode=request.selector_mode.value
        )  # structlog.BoundLoggerBase

    async def capture(self, handles: List[ElementHandle]) -> List[bytes]:
        """
        Capture the selection.

        Args:
            handles: Top-level matches in document order

        Returns:
            Buffers in capture order

        Raises:
            BoundingBoxUnavailable: If nothing in the selection can be measured
        """
        if not handles:
            raise BoundingBoxUnavailable("Selection is empty")

        mode = self.request.selector_mode
        if mode == SelectorMode.FIRST:
            return await self.capture_first(handles)
        if mode == SelectorMode.EACH:
            return await self.capture_each(handles)
        if mode == SelectorMode.UNION:
            return await self.capture_union(handles)
        return await self.capture_stitch(handles)

    async def _document_size(self) -> Dict[str, float]:
        return await self.session.evaluate(scripts.DOCUMENT_SIZE)

    def _padded_region(self, box: ElementBox, document: Dict[str, float]) -> Optional[CaptureRegion]:
        clipped = box.expand(self.request.selector_padding).clip_to(
            document["width"], document["height"]
        )
        if clipped.width <= 0 or clipped.height <= 0:
            return None
        return CaptureRegion.from_box(clipped, self.request.effective_capture_beyond_viewport)

    async def capture_first(self, handles: List[ElementHandle]) -> List[bytes]:
        await self.session.scroll_into_view(handles[0])
        box = await self.session.element_box(handles[0])
        if box is None:
            raise BoundingBoxUnavailable("First matched element has no bounding box")

        region = self._padded_region(box, await self._document_size())
        if region is None:
            raise BoundingBoxUnavailable("First matched element lies outside the document")

        self.regions.append(region)
        return [await self.executor.capture(region)]

    async def capture_each(self, handles: List[ElementHandle]) -> List[bytes]:
        document = await self._document_size()
        buffers: List[bytes] = []
        for index, handle in enumerate(handles):
            await self.session.scroll_into_view(handle)
            box = await self.session.element_box(handle)
            region = self._padded_region(box, document) if box is not None else None
            if region is None:
                self.logger.info("Skipping element without bounding box", index=index)
                continue
            self.regions.append(region)
            buffers.append(await self.executor.capture(region))

        if not buffers:
            raise BoundingBoxUnavailable(
                f"None of the {len(handles)} matched elements has a bounding box"
            )
        self.logger.info("Captured elements", captured=len(buffers), matched=len(handles))
        return buffers

    async def capture_union(self, handles: List[ElementHandle]) -> List[bytes]:
        boxes = [box for box in [await self.session.element_box(h) for h in handles] if box]
        if not boxes:
            raise BoundingBoxUnavailable("No matched element has a bounding box")

        region = self._padded_region(ElementBox.union(boxes), await self._document_size())
        if region is None:
            raise BoundingBoxUnavailable("Selection lies outside the document")

        if self.planner.should_split(self.request.split, region.height):
            plan = await self.planner.plan(
                region, self.request.split_max_pixel_height, self.request.split_overlap_px
            )
            self.regions.extend(plan.regions)
            return await self.executor.capture_sequence(plan.regions)

        self.regions.append(region)
        return [await self.executor.capture(region)]

    async def capture_stitch(self, handles: List[ElementHandle]) -> List[bytes]:
        async with self.stitcher.stitch(
            handles, self.request.selector_gap, self.request.selector_padding
        ) as state:
            await self.session.evaluate(scripts.NEXT_FRAME)
            box = await self.stitcher.measure(state)
            if box is None:
                raise BoundingBoxUnavailable("Stitch container has no bounding box")

            # The container sits at the end of the document, usually off screen
            await self.session.evaluate(scripts.SCROLL_TO, box.y)
            region = CaptureRegion.from_box(box, self.request.effective_capture_beyond_viewport)
            self.regions.append(region)
            self.logger.info(
                "Stitched elements", moved=state.moved, width=box.width, height=box.height
            )
            return [await self.executor.capture(region)]
