"""Demuxing, decoding and RGB conversion backed by PyAV.

The decode loop only talks to the Demuxer, Decoder and Scaler interfaces
below, so it can run against stubs in tests. open_video() builds the PyAV
implementations for a file and releases them when the with-block exits.
"""

import logging
from collections import deque
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Deque, Iterator, NamedTuple, Optional, Protocol, Tuple

import av
import av.error
from av.video.reformatter import Interpolation, VideoReformatter

from titlecard.color_classifier import RgbFrame
from titlecard.errors import DecodeError, StreamError

logger = logging.getLogger(__name__)


class Demuxer(Protocol):
    """Yields compressed packets in container order."""

    video_stream_index: int

    def packets(self) -> Iterator[Tuple[int, Any]]:
        """Yield (stream_index, packet) pairs."""


class Decoder(Protocol):
    """Send/receive style video decoder."""

    def send_packet(self, packet: Any) -> None: ...

    def send_eof(self) -> None: ...

    def receive_frames(self) -> Iterator[Any]:
        """Yield every decoded frame currently available."""


class Scaler(Protocol):
    """Converts a decoded frame to packed RGB24 at the same size."""

    def to_rgb(self, frame: Any) -> RgbFrame: ...


class PyAVDemuxer:
    """Packet source over an open PyAV input container."""

    def __init__(self, container, video_stream_index: int):
        self._container = container
        self.video_stream_index = video_stream_index

    def packets(self) -> Iterator[Tuple[int, Any]]:
        try:
            for packet in self._container.demux():
                # demux() ends each stream with an empty packet; the decode
                # loop flushes explicitly with send_eof() instead
                if packet.size == 0:
                    continue
                yield packet.stream.index, packet
        except av.error.FFmpegError as e:
            raise DecodeError(f"Failed to read packets: {e}") from e


class PyAVDecoder:
    """Wraps a PyAV codec context as a send/receive decoder."""

    def __init__(self, codec_context):
        self._codec_context = codec_context
        self._pending: Deque[Any] = deque()

    def _decode(self, packet) -> None:
        try:
            self._pending.extend(self._codec_context.decode(packet))
        except av.error.FFmpegError as e:
            raise DecodeError(f"Failed to decode video packet: {e}") from e

    def send_packet(self, packet) -> None:
        self._decode(packet)

    def send_eof(self) -> None:
        # Decoding None flushes frames the codec is still holding
        self._decode(None)

    def receive_frames(self) -> Iterator[Any]:
        while self._pending:
            yield self._pending.popleft()

    def close(self) -> None:
        self._pending.clear()


class PyAVScaler:
    """Bilinear conversion of decoded frames to RGB24 at their own size."""

    def __init__(self):
        self._reformatter = VideoReformatter()

    def to_rgb(self, frame) -> RgbFrame:
        try:
            rgb = self._reformatter.reformat(
                frame,
                width=frame.width,
                height=frame.height,
                format="rgb24",
                interpolation=Interpolation.BILINEAR,
            )
            pixels = rgb.to_ndarray()
        except (av.error.FFmpegError, ValueError) as e:
            raise DecodeError(f"Failed to convert frame to RGB24: {e}") from e
        return RgbFrame(rgb.width, rgb.height, pixels.tobytes())

    def close(self) -> None:
        self._reformatter = None


class VideoSource(NamedTuple):
    demuxer: PyAVDemuxer
    decoder: PyAVDecoder
    scaler: PyAVScaler
    frame_count: Optional[int]  # From container metadata, None when unknown


def _select_video_stream(container, media_file: Path):
    stream = container.streams.best("video")
    if stream is None:
        raise StreamError(f"No video stream found in {media_file}")
    return stream


@contextmanager
def open_video(media_file: Path) -> Iterator[VideoSource]:
    """
    Open a video file and build its demuxer, decoder and scaler.

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: If the file cannot be opened
        StreamError: If the container has no usable video stream
        DecodeError: If the container cannot be parsed or no decoder is available
    """
    if not media_file.exists():
        raise FileNotFoundError(f"Media file not found: {media_file}")

    try:
        container = av.open(str(media_file))
    except OSError:
        raise
    except av.error.FFmpegError as e:
        raise DecodeError(f"Failed to open {media_file}: {e}") from e

    decoder = None
    scaler = None
    try:
        stream = _select_video_stream(container, media_file)
        codec_context = stream.codec_context
        if codec_context is None:
            raise DecodeError(f"No decoder available for video stream {stream.index} of {media_file}")

        logger.info(
            f"Using video stream {stream.index} ({codec_context.name}, "
            f"{codec_context.width}x{codec_context.height}) from {media_file.name}"
        )

        decoder = PyAVDecoder(codec_context)
        scaler = PyAVScaler()
        frame_count = stream.frames or None
        yield VideoSource(PyAVDemuxer(container, stream.index), decoder, scaler, frame_count)
    finally:
        if scaler is not None:
            scaler.close()
        if decoder is not None:
            decoder.close()
        container.close()
