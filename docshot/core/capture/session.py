"""
Capture Session
===============

Explicit handle over one browser page used for a single capture run.
Wraps the Playwright page for DOM access and a DevTools protocol session
for per-page viewport emulation and clipped screenshots.
"""

from typing import Optional, Dict, Any, List
import base64

from playwright.async_api import CDPSession, ElementHandle, Page

from docshot.config.logging import get_logger
from docshot.core.capture import scripts
from docshot.models.schemas import CaptureRegion, ElementBox, ImageType, ViewportOptions

logger = get_logger(__name__)

TRANSPARENT = {"r": 0, "g": 0, "b": 0, "a": 0}


class CaptureSession:
    """Browser page plus the viewport state currently applied to it."""

    def __init__(self, page: Page, cdp: CDPSession, viewport: ViewportOptions):
        self.page = page
        self.cdp = cdp
        self.viewport = viewport
        self.logger: Any = logger.bind(component="capture_session")  # structlog.BoundLoggerBase

    @classmethod
    async def attach(cls, page: Page, viewport: ViewportOptions) -> "CaptureSession":
        """
        Open a DevTools session on the page and apply the viewport.

        Args:
            page: Playwright page owned by the caller
            viewport: Initial viewport

        Returns:
            Session bound to the page
        """
        cdp = await page.context.new_cdp_session(page)
        session = cls(page, cdp, viewport)
        await session.set_viewport(viewport.width, viewport.height, viewport.device_scale_factor)
        return session

    async def detach(self) -> None:
        """Release the DevTools session."""
        try:
            await self.cdp.detach()
        except Exception as e:
            self.logger.warning("Failed to detach CDP session", error=str(e))

    @property
    def device_scale_factor(self) -> float:
        return self.viewport.device_scale_factor

    async def set_viewport(self, width: int, height: int, device_scale_factor: float) -> None:
        """Apply viewport metrics; Playwright fixes the scale per context so this goes through CDP."""
        await self.cdp.send(
            "Emulation.setDeviceMetricsOverride",
            {
                "width": width,
                "height": height,
                "deviceScaleFactor": device_scale_factor,
                "mobile": False,
            },
        )
        self.viewport = ViewportOptions(
            width=width, height=height, device_scale_factor=device_scale_factor
        )
        self.logger.debug(
            "Viewport applied", width=width, height=height, device_scale_factor=device_scale_factor
        )

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self.page.evaluate(script, arg)

    async def query_all(self, selector: str) -> List[ElementHandle]:
        """Plain CSS matches in document order, without Playwright selector engines."""
        array = await self.page.evaluate_handle(scripts.QUERY_ALL, selector)
        try:
            properties = await array.get_properties()
            handles: List[ElementHandle] = []
            for key in sorted((k for k in properties if k.isdigit()), key=int):
                element = properties[key].as_element()
                if element is not None:
                    handles.append(element)
            return handles
        finally:
            await array.dispose()

    async def element_box(self, handle: ElementHandle) -> Optional[ElementBox]:
        """Document-relative box, or None for detached or zero-size elements."""
        box = await handle.evaluate(scripts.ELEMENT_BOX)
        if not box:
            return None
        return ElementBox(**box)

    async def scroll_into_view(self, handle: ElementHandle) -> None:
        await handle.evaluate(scripts.SCROLL_INTO_VIEW)

    async def wait_for_function(self, script: str, arg: Any = None, timeout_ms: float = 30000) -> None:
        await self.page.wait_for_function(script, arg=arg, timeout=timeout_ms)

    async def screenshot(
        self,
        region: CaptureRegion,
        image_type: ImageType = "png",
        quality: Optional[int] = None,
        omit_background: bool = False,
        capture_beyond_viewport: Optional[bool] = None,
        from_surface: Optional[bool] = None,
    ) -> bytes:
        """
        Capture one clip rectangle.

        Args:
            region: Clip in document CSS pixels
            image_type: Encoding
            quality: Quality for jpeg/webp, ignored for png
            omit_background: Render with a transparent default background
            capture_beyond_viewport: Overrides the region's flag when set
            from_surface: Sent only when set; None leaves the platform default

        Returns:
            Encoded image bytes
        """
        params: Dict[str, Any] = {
            "format": image_type,
            "clip": region.to_clip(),
            "captureBeyondViewport": (
                region.capture_beyond_viewport
                if capture_beyond_viewport is None
                else capture_beyond_viewport
            ),
        }
        if quality is not None and image_type != "png":
            params["quality"] = quality
        if from_surface is not None:
            params["fromSurface"] = from_surface

        if omit_background:
            await self.cdp.send("Emulation.setDefaultBackgroundColorOverride", {"color": TRANSPARENT})
        try:
            result = await self.cdp.send("Page.captureScreenshot", params)
        finally:
            if omit_background:
                try:
                    await self.cdp.send("Emulation.setDefaultBackgroundColorOverride", {})
                except Exception as e:
                    self.logger.warning("Failed to reset background override", error=str(e))

        return base64.b64decode(result["data"])
