"""Exception types raised by the title card pipeline."""


class TitleCardError(Exception):
    """Base class for all titlecard errors."""


class StreamError(TitleCardError):
    """No decodable video stream could be selected from the container."""


class DecodeError(TitleCardError):
    """Decoder or scaler setup failed, or a frame could not be decoded/converted."""


class FrameBufferError(TitleCardError):
    """Raw pixel buffer length does not match width * height * 3."""


class NoTextDetected(TitleCardError):
    """OCR found no text on the title card."""


class EpisodeNotFound(TitleCardError):
    """The episode catalog is empty, so nothing can be matched."""


class CatalogError(TitleCardError):
    """The episode catalog file is missing required columns or is unreadable."""


class OcrUnavailable(TitleCardError):
    """The OCR engine or its model files could not be loaded."""


class ScanCancelled(TitleCardError):
    """The scan was interrupted by the exit flag before finishing."""


class OcrFailed(TitleCardError):
    """The OCR engine raised while reading a title card."""
