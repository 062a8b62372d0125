"""
Output Writer
=============

Persist capture results: one buffer as a single file, several buffers as
numbered part files in capture order.
"""

from typing import List, Union
from pathlib import Path

from docshot.config.logging import get_logger
from docshot.models.schemas import CaptureResult, ImageType

logger = get_logger(__name__)

EXTENSIONS = {"png": ".png", "jpeg": ".jpg", "webp": ".webp"}


def part_paths(output_path: Union[str, Path], count: int, image_type: ImageType = "png") -> List[Path]:
    """
    Output file names for a capture of count buffers.

    A single buffer keeps output_path; several become
    ``<base>.part-001<ext>`` through ``<base>.part-NNN<ext>``.
    """
    path = Path(output_path)
    if count <= 1:
        return [path]

    ext = EXTENSIONS[image_type]
    base = str(path)[: -len(path.suffix)] if path.suffix else str(path)
    return [Path(f"{base}.part-{index:03d}{ext}") for index in range(1, count + 1)]


def write_capture_result(result: CaptureResult, output_path: Union[str, Path]) -> List[Path]:
    """
    Write every buffer of a capture result.

    Args:
        result: Capture result
        output_path: Target file for a single image, name base for parts

    Returns:
        Written paths in capture order
    """
    paths = part_paths(output_path, len(result.buffers), result.image_type)
    paths[0].parent.mkdir(parents=True, exist_ok=True)

    for path, data in zip(paths, result.buffers):
        path.write_bytes(data)

    logger.info("Capture written", parts=len(paths), first=str(paths[0]))
    return paths
