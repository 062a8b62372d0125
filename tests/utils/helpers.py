"""
Test Helpers
============

Helper functions for building fake documents and requests.
"""

from typing import Any, Dict, Optional

from docshot.models.schemas import CaptureRequest, ViewportOptions

from .mocks import FakeCaptureSession


def make_request(**overrides: Any) -> CaptureRequest:
    """Capture request with quiet test defaults and overrides applied."""
    fields: Dict[str, Any] = {
        "viewport": ViewportOptions(width=800, height=600, device_scale_factor=1),
        "scroll_to_load": False,
        "max_pixel_width": 0,
    }
    fields.update(overrides)
    return CaptureRequest(**fields)


def make_spaced_document(spacer: float = 2000, viewport: Optional[ViewportOptions] = None) -> FakeCaptureSession:
    """Two 300x80 boxes #a and #c separated by a tall spacer."""
    session = FakeCaptureSession(width=800, height=80 + spacer + 80 + 16, viewport=viewport)
    session.add_element("a", {"#a", ".box"}, (8, 8, 300, 80))
    session.add_element("spacer", {".spacer"}, (8, 88, 784, spacer))
    session.add_element("c", {"#c", ".box"}, (8, 88 + spacer, 300, 80))
    return session


def make_tall_document(height: float, block: float = 50) -> FakeCaptureSession:
    """Document of stacked blocks of equal height."""
    session = FakeCaptureSession(width=800, height=height)
    bottom = block
    while bottom <= height:
        session.block_bottoms.append(bottom)
        bottom += block
    return session
