"""
Unit Tests for Schemas
======================

Tests for request normalization, front matter parsing and geometry models.
"""

import pytest
from pydantic import ValidationError

from docshot.models.schemas import (
    CaptureRegion, CaptureRequest, CaptureResult, ElementBox, SelectorMode, SplitPlan
)


class TestCaptureRequest:
    """Test request defaults and normalization."""

    def test_defaults(self):
        request = CaptureRequest()

        assert request.image_type == "png"
        assert request.full_page is True
        assert request.selector is None
        assert request.selector_mode == SelectorMode.STITCH
        assert request.split == "auto"
        assert request.split_max_pixel_height == 14000
        assert request.max_pixel_width == 2000
        assert request.viewport.device_scale_factor == 2

    def test_camel_case_aliases(self):
        """Options can be given by their camelCase names."""
        request = CaptureRequest.model_validate(
            {"fullPage": False, "selectorMode": "each", "splitOverlapPx": 40, "viewport": {"deviceScaleFactor": 1}}
        )

        assert request.full_page is False
        assert request.selector_mode == SelectorMode.EACH
        assert request.split_overlap_px == 40
        assert request.viewport.device_scale_factor == 1

    def test_jpg_is_jpeg(self):
        assert CaptureRequest(type="JPG").image_type == "jpeg"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            CaptureRequest(type="gif")

    def test_single_selector_becomes_list(self):
        assert CaptureRequest(selector=" #a ").selector == ["#a"]

    def test_blank_selector_entries_dropped(self):
        """Blank entries disappear but an empty selector is still a selector."""
        request = CaptureRequest(selector=["", "  "])

        assert request.selector == []
        assert request.has_selector is True

    def test_split_accepts_auto_in_any_case(self):
        assert CaptureRequest(split="AUTO").split == "auto"
        assert CaptureRequest(split=True).split is True

    def test_scroll_to_load_defaults_to_full_page_without_selector(self):
        assert CaptureRequest().effective_scroll_to_load is True
        assert CaptureRequest(selector="#a").effective_scroll_to_load is False
        assert CaptureRequest(full_page=False).effective_scroll_to_load is False
        assert CaptureRequest(selector="#a", scroll_to_load=True).effective_scroll_to_load is True

    def test_capture_beyond_viewport_defaults_on(self):
        assert CaptureRequest().effective_capture_beyond_viewport is True
        assert CaptureRequest(capture_beyond_viewport=False).effective_capture_beyond_viewport is False

    def test_request_is_immutable(self):
        with pytest.raises(ValidationError):
            CaptureRequest().quality = 10


class TestFrontMatter:
    """Test lenient front matter parsing."""

    def test_reads_known_options(self):
        request = CaptureRequest.from_front_matter(
            {
                "type": "jpg",
                "quality": 80,
                "selector": [".slide", 3],
                "selectorMode": "Union",
                "split": True,
                "scroll": {"stepPx": 400, "delayMs": 0},
                "viewport": {"width": 1200, "deviceScaleFactor": 1.5},
            }
        )

        assert request.image_type == "jpeg"
        assert request.quality == 80
        assert request.selector == [".slide"]
        assert request.selector_mode == SelectorMode.UNION
        assert request.split is True
        assert request.scroll.step_px == 400
        assert request.scroll.delay_ms == 0
        assert request.viewport.width == 1200
        assert request.viewport.height == 800

    def test_wrong_types_fall_back_to_defaults(self):
        request = CaptureRequest.from_front_matter(
            {
                "type": "gif",
                "quality": "high",
                "fullPage": "yes",
                "split": "sometimes",
                "selectorMode": "zigzag",
                "maxPixelWidth": float("nan"),
                "scroll": "fast",
            }
        )

        assert request == CaptureRequest()

    def test_out_of_range_values_are_dropped(self):
        request = CaptureRequest.from_front_matter(
            {"quality": 500, "splitMaxPixelHeight": 0, "viewport": {"width": -5}, "fullPage": False}
        )

        assert request.quality is None
        assert request.split_max_pixel_height == 14000
        assert request.viewport.width == 1000
        assert request.full_page is False

    @pytest.mark.parametrize("data", [None, [], "type: png", 42])
    def test_non_mapping_gives_defaults(self, data):
        assert CaptureRequest.from_front_matter(data) == CaptureRequest()


class TestGeometry:
    """Test box and region helpers."""

    def test_expand_and_clip(self):
        box = ElementBox(x=10, y=10, width=100, height=50).expand(20)

        assert (box.x, box.y, box.width, box.height) == (-10, -10, 140, 90)
        clipped = box.clip_to(100, 1000)
        assert (clipped.x, clipped.y, clipped.width, clipped.height) == (0, 0, 100, 80)

    def test_union(self):
        union = ElementBox.union(
            [ElementBox(x=8, y=8, width=300, height=80), ElementBox(x=8, y=2088, width=300, height=80)]
        )

        assert (union.y, union.height) == (8, 2160)

    def test_union_of_nothing(self):
        with pytest.raises(ValueError):
            ElementBox.union([])

    def test_region_requires_positive_area(self):
        with pytest.raises(ValidationError):
            CaptureRegion(x=0, y=0, width=0, height=10)

    def test_plan_and_result_need_content(self):
        with pytest.raises(ValidationError):
            SplitPlan(regions=[], source_height=10, device_scale_factor=1)
        with pytest.raises(ValidationError):
            CaptureResult(buffers=[], device_scale_factor=1)

    def test_result_accessors(self):
        result = CaptureResult(buffers=[b"a", b"b"], device_scale_factor=1)

        assert result.buffer == b"a"
        assert result.is_multipart is True
