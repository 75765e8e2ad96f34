"""Streaming decode loop that finds the first title card frame in a video."""

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, NamedTuple, Optional

from PIL import Image

from titlecard.color_classifier import RgbFrame, classify
from titlecard.config import DEFAULT_SCAN_CONFIG, ScanConfig
from titlecard.errors import ScanCancelled
from titlecard.exit_flag import FORCE_EXIT
from titlecard.frame_sampler import should_sample
from titlecard.media import Decoder, Demuxer, Scaler, open_video

logger = logging.getLogger(__name__)

Classifier = Callable[[RgbFrame, ScanConfig], Optional[Image.Image]]
FrameTicker = Callable[[int], None]


class MatchResult(NamedTuple):
    image: Image.Image
    frame_index: int


@dataclass
class ScanState:
    """Mutable state shared by the feeding and flush phases."""
    frame_index: int = 0
    classified: int = 0
    packets: int = 0


def _drain(
    decoder: Decoder,
    scaler: Scaler,
    state: ScanState,
    config: ScanConfig,
    classifier: Classifier,
    frame_ticker: Optional[FrameTicker],
) -> Optional[MatchResult]:
    """Classify every frame the decoder has ready; stop at the first match."""
    for frame in decoder.receive_frames():
        if should_sample(state.frame_index, config):
            rgb_frame = scaler.to_rgb(frame)
            state.classified += 1
            image = classifier(rgb_frame, config)
            if image is not None:
                return MatchResult(image, state.frame_index)
        state.frame_index += 1
        if frame_ticker is not None:
            frame_ticker(1)
    return None


def scan_stream(
    demuxer: Demuxer,
    decoder: Decoder,
    scaler: Scaler,
    config: ScanConfig = DEFAULT_SCAN_CONFIG,
    classifier: Classifier = classify,
    frame_ticker: Optional[FrameTicker] = None,
    cancel_event: Optional[threading.Event] = FORCE_EXIT,
) -> Optional[MatchResult]:
    """
    Run the decode loop until the first title card frame or end of stream.

    Packets of the selected video stream are fed to the decoder and all
    frames it produces are drained after each one. When packets run out the
    decoder is flushed and drained once more.

    Args:
        demuxer: Packet source with the selected video stream index
        decoder: Decoder for that stream
        scaler: RGB24 converter for decoded frames
        config: Sampling policy and color thresholds
        classifier: Returns an image for a title card frame, else None
        frame_ticker: Called with 1 for every decoded frame that did not match
        cancel_event: Checked between packets; when set, ScanCancelled is raised

    Returns:
        MatchResult with the matched image and its decoded frame index, or
        None if the stream ended without a match
    """
    state = ScanState()
    stream_index = demuxer.video_stream_index

    for packet_stream_index, packet in demuxer.packets():
        if cancel_event is not None and cancel_event.is_set():
            raise ScanCancelled(f"Scan cancelled after {state.frame_index} frames")
        if packet_stream_index != stream_index:
            continue

        state.packets += 1
        decoder.send_packet(packet)
        result = _drain(decoder, scaler, state, config, classifier, frame_ticker)
        if result is not None:
            return result

    decoder.send_eof()
    result = _drain(decoder, scaler, state, config, classifier, frame_ticker)
    if result is None:
        logger.debug(
            f"Stream exhausted: {state.frame_index} frames decoded from {state.packets} packets, "
            f"{state.classified} classified"
        )
    return result


def find_title_card(
    media_file: Path,
    config: ScanConfig = DEFAULT_SCAN_CONFIG,
    frame_ticker: Optional[FrameTicker] = None,
    on_open: Optional[Callable[[Optional[int]], None]] = None,
    cancel_event: Optional[threading.Event] = FORCE_EXIT,
) -> Optional[MatchResult]:
    """
    Scan a video file for its title card.

    Args:
        media_file: Path to the video file
        config: Sampling policy and color thresholds
        frame_ticker: Progress callback, see scan_stream()
        on_open: Called with the container's frame count (None if unknown)
            once the file is open, e.g. to size a progress bar
        cancel_event: See scan_stream()

    Returns:
        MatchResult or None

    Raises:
        OSError: If the file cannot be opened
        StreamError: If there is no video stream
        DecodeError: If decoding or color conversion fails
        FrameBufferError: If a converted frame has an inconsistent size
        ScanCancelled: If cancel_event is set during the scan
    """
    scan_start = time.time()
    with open_video(media_file) as source:
        if on_open is not None:
            on_open(source.frame_count)
        result = scan_stream(
            source.demuxer,
            source.decoder,
            source.scaler,
            config=config,
            classifier=classify,
            frame_ticker=frame_ticker,
            cancel_event=cancel_event,
        )

    elapsed = time.time() - scan_start
    if result is not None:
        logger.info(f"Found title card in {media_file.name} at frame {result.frame_index} ({elapsed:.1f}s)")
    else:
        logger.info(f"No title card found in {media_file.name} ({elapsed:.1f}s)")
    return result


def save_title_card(result: MatchResult, output_path: Path) -> Path:
    """Write the matched frame to output_path; the format follows the file suffix."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    result.image.save(output_path)
    return output_path
