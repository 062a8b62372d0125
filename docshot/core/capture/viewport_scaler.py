"""
Viewport Scaler
===============

Lower the device scale factor so the captured bitmap stays within a maximum
physical width. Never scales up.
"""

from typing import Any, Optional

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.capture import scripts
from docshot.core.capture.session import CaptureSession

logger = get_logger(__name__)


def compute_device_scale_factor(
    current: float,
    max_pixel_width: int,
    css_width: float,
    minimum: float = 0.25,
) -> float:
    """
    Scale factor that keeps css_width * factor within max_pixel_width.

    Args:
        current: Scale factor configured by the caller
        max_pixel_width: Maximum physical width, 0 disables clamping
        css_width: CSS width of the region about to be captured
        minimum: Lowest factor returned

    Returns:
        New scale factor, never above current
    """
    if max_pixel_width <= 0 or css_width <= 0:
        return current
    desired = min(current, max_pixel_width / css_width)
    return min(current, max(minimum, desired))


class ViewportScaler:
    """Applies the clamped scale factor to the session viewport."""

    def __init__(self, session: CaptureSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="viewport_scaler")  # structlog.BoundLoggerBase

    async def apply(self, max_pixel_width: int, css_width: float) -> float:
        """
        Re-apply the viewport when the clamped factor differs noticeably.

        Args:
            max_pixel_width: Maximum physical width, 0 disables clamping
            css_width: CSS width of the region about to be captured

        Returns:
            Scale factor in effect after the call
        """
        viewport = self.session.viewport
        current = viewport.device_scale_factor
        target = compute_device_scale_factor(
            current, max_pixel_width, css_width, self.settings.min_device_scale_factor
        )

        if abs(target - current) < self.settings.scale_change_epsilon:
            return current

        await self.session.set_viewport(viewport.width, viewport.height, target)
        await self.session.evaluate(scripts.NEXT_FRAME)
        self.logger.info(
            "Device scale factor clamped",
            css_width=css_width,
            max_pixel_width=max_pixel_width,
            previous=current,
            device_scale_factor=target,
        )
        return target
