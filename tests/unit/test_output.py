"""
Unit Tests for Output Writer
===========================

Tests for part file naming and writing capture results.
"""

from pathlib import Path

from docshot.core.rendering.output import part_paths, write_capture_result
from docshot.models.schemas import CaptureResult

from tests.utils.mocks import PNG_BYTES


class TestPartPaths:
    """Test output file naming."""

    def test_single_buffer_keeps_path(self):
        assert part_paths("out/page.png", 1) == [Path("out/page.png")]

    def test_parts_are_numbered_in_order(self):
        assert part_paths("out/page.png", 3) == [
            Path("out/page.part-001.png"),
            Path("out/page.part-002.png"),
            Path("out/page.part-003.png"),
        ]

    def test_extension_follows_image_type(self):
        """jpeg parts use .jpg regardless of the given suffix."""
        assert part_paths("page.jpeg", 2, "jpeg") == [Path("page.part-001.jpg"), Path("page.part-002.jpg")]

    def test_path_without_suffix(self):
        assert part_paths("shots/doc", 2, "webp")[1] == Path("shots/doc.part-002.webp")


class TestWriteCaptureResult:
    """Test writing buffers to disk."""

    def test_writes_single_file(self, temp_dir):
        result = CaptureResult(buffers=[PNG_BYTES], device_scale_factor=1)

        paths = write_capture_result(result, temp_dir / "page.png")

        assert paths == [temp_dir / "page.png"]
        assert paths[0].read_bytes() == PNG_BYTES

    def test_writes_parts_into_new_directory(self, temp_dir):
        result = CaptureResult(buffers=[b"one", b"two"], device_scale_factor=1)

        paths = write_capture_result(result, temp_dir / "nested" / "page.png")

        assert [p.name for p in paths] == ["page.part-001.png", "page.part-002.png"]
        assert [p.read_bytes() for p in paths] == [b"one", b"two"]
