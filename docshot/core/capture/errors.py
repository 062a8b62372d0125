"""
Capture Errors
==============

Typed failures raised by the capture engine. Every error names the stage
that failed so callers can report it without inspecting messages.
"""


class CaptureError(Exception):
    """Base exception for capture failures."""

    stage = "capture"


class SelectorEmpty(CaptureError):
    """Selector is blank after trimming or matches no element."""

    stage = "resolve"


class InvalidSelector(CaptureError):
    """The browser rejected the selector syntax."""

    stage = "resolve"


class BoundingBoxUnavailable(CaptureError):
    """No usable bounding box could be measured for the selection."""

    stage = "measure"


class StitchContainerCreationFailed(CaptureError):
    """The synthetic stitch container could not be built in the document."""

    stage = "stitch"


class CaptureFailed(CaptureError):
    """The screenshot primitive failed after every fallback variant."""

    stage = "capture"
