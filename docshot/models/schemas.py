"""
Pydantic Models and Schemas
===========================

Core data models for capture requests, document geometry and capture results.
All models include validation and type hints.
"""

from typing import Optional, List, Dict, Any, Union, Literal, Mapping, Sequence, Tuple
from enum import Enum
import math

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


# Enums
class SelectorMode(str, Enum):
    """How multiple selector matches are combined."""
    FIRST = "first"
    EACH = "each"
    UNION = "union"
    STITCH = "stitch"


ImageType = Literal["png", "jpeg", "webp"]
SplitSetting = Union[bool, Literal["auto"]]


# Option Models
class ViewportOptions(BaseModel):
    """Viewport applied to the page before capturing."""
    width: int = Field(1000, gt=0, le=16384, description="Viewport width in CSS px")
    height: int = Field(800, gt=0, le=16384, description="Viewport height in CSS px")
    device_scale_factor: float = Field(
        2.0, gt=0, le=8.0, alias="deviceScaleFactor", description="Device pixel ratio"
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ScrollOptions(BaseModel):
    """Bounds for the scroll-to-load pass."""
    step_px: int = Field(800, gt=0, alias="stepPx", description="Pixels scrolled per step")
    delay_ms: int = Field(100, ge=0, alias="delayMs", description="Pause after each step")
    max_steps: int = Field(200, ge=0, alias="maxSteps", description="Maximum number of steps")
    max_time_ms: int = Field(15000, ge=0, alias="maxTimeMs", description="Overall time budget")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CaptureRequest(BaseModel):
    """Immutable input to one capture run."""
    image_type: ImageType = Field("png", alias="type", description="Output encoding")
    quality: Optional[int] = Field(None, ge=0, le=100, description="Quality for jpeg/webp")
    full_page: bool = Field(True, alias="fullPage", description="Capture the whole document")

    # Selector options
    selector: Optional[List[str]] = Field(None, description="CSS selector(s) to capture")
    selector_mode: SelectorMode = Field(SelectorMode.STITCH, alias="selectorMode")
    selector_padding: float = Field(0, ge=0, alias="selectorPadding", description="Padding in CSS px")
    selector_gap: float = Field(16, ge=0, alias="selectorGap", description="Stitch gap in CSS px")

    # Split options
    split: SplitSetting = Field("auto", description="true, false or 'auto'")
    split_max_pixel_height: int = Field(14000, gt=0, alias="splitMaxPixelHeight")
    split_overlap_px: float = Field(0, ge=0, alias="splitOverlapPx")
    max_pixel_width: int = Field(2000, ge=0, alias="maxPixelWidth", description="0 disables")

    # Browser options
    viewport: ViewportOptions = Field(default_factory=ViewportOptions)
    capture_beyond_viewport: Optional[bool] = Field(None, alias="captureBeyondViewport")
    from_surface: Optional[bool] = Field(None, alias="fromSurface")
    omit_background: bool = Field(False, alias="omitBackground")
    scroll_to_load: Optional[bool] = Field(None, alias="scrollToLoad")
    scroll: ScrollOptions = Field(default_factory=ScrollOptions)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("image_type", mode="before")
    @classmethod
    def normalize_image_type(cls, v: Any) -> Any:
        """Accept 'jpg' and mixed case."""
        if isinstance(v, str):
            v = v.lower()
            if v == "jpg":
                return "jpeg"
        return v

    @field_validator("selector", mode="before")
    @classmethod
    def normalize_selector(cls, v: Any) -> Any:
        """Turn a single selector into a list and drop blank entries."""
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple)):
            cleaned = [s.strip() for s in v if isinstance(s, str) and s.strip()]
            return cleaned
        return v

    @field_validator("selector_mode", mode="before")
    @classmethod
    def normalize_selector_mode(cls, v: Any) -> Any:
        """Selector modes are case-insensitive."""
        return v.lower() if isinstance(v, str) else v

    @field_validator("split", mode="before")
    @classmethod
    def normalize_split(cls, v: Any) -> Any:
        """Accept 'auto' in any case."""
        if isinstance(v, str) and v.strip().lower() == "auto":
            return "auto"
        return v

    @property
    def has_selector(self) -> bool:
        """Whether a selector was supplied (possibly resolving to nothing)."""
        return self.selector is not None

    @property
    def effective_scroll_to_load(self) -> bool:
        """Scroll-to-load defaults to on for full-page captures without a selector."""
        if self.scroll_to_load is not None:
            return self.scroll_to_load
        return self.full_page and not self.has_selector

    @property
    def effective_capture_beyond_viewport(self) -> bool:
        """Beyond-viewport capture defaults to on."""
        if self.capture_beyond_viewport is not None:
            return self.capture_beyond_viewport
        return True

    @classmethod
    def from_front_matter(cls, data: Optional[Mapping[str, Any]]) -> "CaptureRequest":
        """
        Build a request from loosely typed front matter.

        Fields with the wrong type or unknown values are dropped so their
        defaults apply; nothing in the mapping can make this raise.

        Args:
            data: Mapping using the camelCase option names

        Returns:
            Normalized capture request
        """
        if not isinstance(data, Mapping):
            return cls()

        fields: Dict[str, Any] = {}

        image_type = data.get("type")
        if isinstance(image_type, str) and image_type.lower() in ("png", "jpeg", "jpg", "webp"):
            fields["type"] = image_type

        for key in ("quality", "maxPixelWidth", "splitMaxPixelHeight"):
            value = _finite_number(data.get(key))
            if value is not None:
                fields[key] = int(value)
        for key in ("splitOverlapPx", "selectorPadding", "selectorGap"):
            value = _finite_number(data.get(key))
            if value is not None:
                fields[key] = value

        for key in ("fullPage", "scrollToLoad", "omitBackground", "fromSurface", "captureBeyondViewport"):
            if isinstance(data.get(key), bool):
                fields[key] = data[key]

        split = data.get("split")
        if isinstance(split, bool):
            fields["split"] = split
        elif isinstance(split, str) and split.lower() == "auto":
            fields["split"] = "auto"

        selector = data.get("selector")
        if isinstance(selector, str):
            fields["selector"] = selector
        elif isinstance(selector, (list, tuple)):
            fields["selector"] = [s for s in selector if isinstance(s, str)]

        mode = data.get("selectorMode")
        if isinstance(mode, str) and mode.lower() in {m.value for m in SelectorMode}:
            fields["selectorMode"] = mode.lower()

        scroll = data.get("scroll")
        if isinstance(scroll, Mapping):
            scroll_fields: Dict[str, Any] = {}
            for key in ("stepPx", "delayMs", "maxSteps", "maxTimeMs"):
                value = _finite_number(scroll.get(key))
                if value is not None:
                    scroll_fields[key] = int(value)
            if scroll_fields:
                try:
                    fields["scroll"] = ScrollOptions.model_validate(scroll_fields)
                except ValidationError:
                    pass

        viewport = data.get("viewport")
        if isinstance(viewport, Mapping):
            viewport_fields: Dict[str, Any] = {}
            for key in ("width", "height"):
                value = _finite_number(viewport.get(key))
                if value is not None:
                    viewport_fields[key] = int(value)
            dsf = _finite_number(viewport.get("deviceScaleFactor"))
            if dsf is not None:
                viewport_fields["deviceScaleFactor"] = dsf
            if viewport_fields:
                try:
                    fields["viewport"] = ViewportOptions.model_validate(viewport_fields)
                except ValidationError:
                    pass

        # Drop out-of-range values one round at a time until the rest validates
        while True:
            try:
                return cls.model_validate(fields)
            except ValidationError as e:
                rejected = {err["loc"][0] for err in e.errors() if err["loc"]}
                if not rejected & fields.keys():
                    raise
                for key in rejected:
                    fields.pop(key, None)


def _finite_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


# Geometry Models
class ElementBox(BaseModel):
    """Document-relative box of an element in CSS pixels."""
    x: float
    y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def expand(self, padding: float) -> "ElementBox":
        """Grow the box by padding on every side."""
        if padding <= 0:
            return self
        return ElementBox(
            x=self.x - padding,
            y=self.y - padding,
            width=self.width + 2 * padding,
            height=self.height + 2 * padding,
        )

    def clip_to(self, document_width: float, document_height: float) -> "ElementBox":
        """Clip the box to the document rectangle starting at the origin."""
        left = max(0.0, self.x)
        top = max(0.0, self.y)
        right = min(document_width, self.right)
        bottom = min(document_height, self.bottom)
        return ElementBox(x=left, y=top, width=max(0.0, right - left), height=max(0.0, bottom - top))

    @classmethod
    def union(cls, boxes: Sequence["ElementBox"]) -> "ElementBox":
        """Axis-aligned rectangle covering every box."""
        if not boxes:
            raise ValueError("Cannot build the union of zero boxes")
        left = min(b.x for b in boxes)
        top = min(b.y for b in boxes)
        right = max(b.right for b in boxes)
        bottom = max(b.bottom for b in boxes)
        return cls(x=left, y=top, width=right - left, height=bottom - top)


class CaptureRegion(BaseModel):
    """Clip rectangle handed to the screenshot primitive."""
    x: float
    y: float
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    capture_beyond_viewport: bool = True

    model_config = ConfigDict(frozen=True)

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @classmethod
    def from_box(cls, box: ElementBox, capture_beyond_viewport: bool = True) -> "CaptureRegion":
        return cls(
            x=box.x,
            y=box.y,
            width=box.width,
            height=box.height,
            capture_beyond_viewport=capture_beyond_viewport,
        )

    def to_clip(self) -> Dict[str, float]:
        """Clip dictionary in the DevTools protocol shape."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height, "scale": 1}


class SplitPlan(BaseModel):
    """Ordered slices covering a source rectangle from top to bottom."""
    regions: List[CaptureRegion] = Field(..., min_length=1)
    source_height: float = Field(..., gt=0)
    device_scale_factor: float = Field(..., gt=0)

    @property
    def is_split(self) -> bool:
        return len(self.regions) > 1


# Result Models
class CaptureResult(BaseModel):
    """Ordered image buffers produced by one capture run."""
    buffers: List[bytes] = Field(..., min_length=1, description="Encoded images, top-most first")
    image_type: ImageType = Field("png", description="Encoding of every buffer")
    device_scale_factor: float = Field(..., gt=0, description="Scale factor used for capture")
    regions: List[CaptureRegion] = Field(default_factory=list, description="Captured clip regions")
    dimensions: List[Optional[Tuple[int, int]]] = Field(
        default_factory=list, description="Pixel size per buffer when decodable"
    )

    @property
    def buffer(self) -> bytes:
        """The first (top-most) image."""
        return self.buffers[0]

    @property
    def is_multipart(self) -> bool:
        return len(self.buffers) > 1
