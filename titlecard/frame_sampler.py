"""Sampling policy deciding which decoded frames get classified."""

from titlecard.config import DEFAULT_SCAN_CONFIG, ScanConfig


def should_sample(frame_index: int, config: ScanConfig = DEFAULT_SCAN_CONFIG) -> bool:
    """
    Return True if the decoded frame at frame_index should be classified.

    Frames up to and including the warmup index are skipped, after that only
    every stride-th frame is eligible.
    """
    return frame_index > config.warmup and frame_index % config.stride == 0
