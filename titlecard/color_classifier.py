"""Dominant-color test used to recognize title card frames."""

import logging
from typing import NamedTuple, Optional

import numpy as np
from PIL import Image

from titlecard.config import DEFAULT_SCAN_CONFIG, ScanConfig
from titlecard.errors import FrameBufferError

logger = logging.getLogger(__name__)


class RgbFrame(NamedTuple):
    """Packed 24-bit RGB pixels (row-major, no line padding)."""
    width: int
    height: int
    data: bytes


def _pixels(frame: RgbFrame) -> np.ndarray:
    expected = frame.width * frame.height * 3
    if len(frame.data) != expected:
        raise FrameBufferError(
            f"Frame buffer has {len(frame.data)} bytes, expected {expected} "
            f"for {frame.width}x{frame.height} RGB24"
        )
    return np.frombuffer(frame.data, dtype=np.uint8).reshape(frame.height, frame.width, 3)


def matching_fraction(frame: RgbFrame, config: ScanConfig = DEFAULT_SCAN_CONFIG) -> float:
    """Fraction of pixels with blue > blue_min, red < red_max and green < green_max."""
    pixels = _pixels(frame)
    if pixels.size == 0:
        return 0.0
    red = pixels[..., 0]
    green = pixels[..., 1]
    blue = pixels[..., 2]
    mask = (blue > config.blue_min) & (red < config.red_max) & (green < config.green_max)
    return int(np.count_nonzero(mask)) / mask.size


def classify(frame: RgbFrame, config: ScanConfig = DEFAULT_SCAN_CONFIG) -> Optional[Image.Image]:
    """
    Check whether a frame is dominated by the title card color.

    Args:
        frame: RGB24 frame to test
        config: Thresholds to apply (default: the blue title card thresholds)

    Returns:
        An RGB PIL Image holding its own copy of the pixels if more than
        min_fraction of the pixels qualify, else None

    Raises:
        FrameBufferError: If the buffer size does not match the frame dimensions
    """
    fraction = matching_fraction(frame, config)
    if fraction > config.min_fraction:
        logger.debug(f"Frame {frame.width}x{frame.height} matched ({fraction:.3f} qualifying pixels)")
        return Image.frombytes("RGB", (frame.width, frame.height), bytes(frame.data))
    return None
