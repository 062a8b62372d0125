"""
Split Planner
=============

Decide whether a tall region must be captured as several slices and compute
cut boundaries that prefer the bottom edges of block elements.
"""

from typing import Any, Iterable, List, Optional, Union
import math

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.capture import scripts
from docshot.core.capture.session import CaptureSession
from docshot.models.schemas import CaptureRegion, SplitPlan

logger = get_logger(__name__)

AUTO_SPLIT_THRESHOLD_PX = 30000
DEFAULT_MAX_PIXEL_HEIGHT = 14000
MAX_ITERATIONS = 10000


def should_split(
    split: Union[bool, str],
    css_height: float,
    device_scale_factor: float,
    threshold_px: int = AUTO_SPLIT_THRESHOLD_PX,
) -> bool:
    """
    Split decision for a region.

    'auto' splits only when the physical height exceeds the threshold, which
    stays under common GPU texture limits.
    """
    if split is True:
        return True
    if split is False:
        return False
    return math.ceil(css_height * device_scale_factor) > threshold_px


def min_slice_height(target_slice_height: float) -> float:
    return min(400.0, 0.25 * target_slice_height)


def plan_slices(
    region: CaptureRegion,
    device_scale_factor: float,
    max_pixel_height: int = DEFAULT_MAX_PIXEL_HEIGHT,
    overlap_px: float = 0,
    candidates: Iterable[float] = (),
    max_iterations: int = MAX_ITERATIONS,
) -> SplitPlan:
    """
    Cut a region into slices no taller than max_pixel_height physical pixels.

    Each cut lands on the largest candidate offset inside the slice window
    that still leaves at least the minimum slice height. Without such a
    candidate the cut falls at the window end, even if that bisects an element.

    Args:
        region: Source rectangle in document CSS px
        device_scale_factor: Current device pixel ratio
        max_pixel_height: Maximum slice height in physical px
        overlap_px: CSS px repeated at the top of each following slice
        candidates: Region-relative CSS px offsets of block bottoms
        max_iterations: Hard ceiling on emitted slices

    Returns:
        Non-empty plan ordered top to bottom
    """
    height = region.height
    target = max(1, math.floor(max_pixel_height / device_scale_factor))
    minimum = min_slice_height(target)
    cuts = sorted({c for c in candidates if 0 < c <= height})

    regions: List[CaptureRegion] = []
    y = 0.0
    for _ in range(max_iterations):
        if y >= height:
            break

        ideal = min(height, y + target)
        if ideal >= height:
            cut = height
        else:
            cut = ideal
            for c in cuts:
                if c > ideal:
                    break
                if c > y + 1 and c - y >= minimum:
                    cut = c

        regions.append(
            CaptureRegion(
                x=region.x,
                y=region.y + y,
                width=region.width,
                height=cut - y,
                capture_beyond_viewport=region.capture_beyond_viewport,
            )
        )
        if cut >= height:
            break

        next_y = max(y, cut - overlap_px)
        # An overlap as large as the slice would never advance
        if next_y <= y:
            next_y = cut
        y = next_y
    else:
        logger.warning(
            "Split iteration ceiling reached",
            max_iterations=max_iterations,
            covered=y,
            height=height,
        )

    return SplitPlan(regions=regions, source_height=height, device_scale_factor=device_scale_factor)


class SplitPlanner:
    """Collects cut candidates from the document and plans slices."""

    def __init__(self, session: CaptureSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="split_planner")  # structlog.BoundLoggerBase

    def should_split(self, split: Union[bool, str], css_height: float) -> bool:
        return should_split(
            split,
            css_height,
            self.session.device_scale_factor,
            self.settings.auto_split_threshold_px,
        )

    async def cut_candidates(self, region: CaptureRegion) -> List[float]:
        """Region-relative bottoms of top-level blocks, list items expanded."""
        offsets = await self.session.evaluate(
            scripts.CUT_CANDIDATES,
            {
                "rootSelector": self.settings.content_root_selector,
                "top": region.y,
                "bottom": region.bottom,
            },
        )
        return sorted({float(o) for o in offsets or []})

    async def plan(
        self, region: CaptureRegion, max_pixel_height: int, overlap_px: float
    ) -> SplitPlan:
        """
        Plan slices for a region using the document's block boundaries.

        Args:
            region: Source rectangle in document CSS px
            max_pixel_height: Maximum slice height in physical px
            overlap_px: CSS px overlap between consecutive slices

        Returns:
            Split plan for the region
        """
        candidates = await self.cut_candidates(region)
        plan = plan_slices(
            region,
            self.session.device_scale_factor,
            max_pixel_height,
            overlap_px,
            candidates,
            self.settings.max_split_iterations,
        )
        self.logger.info(
            "Split planned",
            height=region.height,
            device_scale_factor=self.session.device_scale_factor,
            candidates=len(candidates),
            slices=len(plan.regions),
        )
        return plan
