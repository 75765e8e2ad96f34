"""OCR engine for reading title card text using EasyOCR."""

import logging
import warnings
from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from titlecard.config import OcrConfig
from titlecard.errors import OcrFailed, OcrUnavailable

try:
    import easyocr
    import torch
    has_easyocr = True

    # Suppress PyTorch pin_memory warnings on MPS (Apple Silicon)
    warnings.filterwarnings('ignore', message='.*pin_memory.*', category=UserWarning)
    warnings.filterwarnings('ignore', message='.*not supported on MPS.*', category=UserWarning)
except ImportError:
    easyocr = None
    torch = None
    has_easyocr = False

# Global reader instance (initialized lazily)
EASYOCR_READER = None
_READER_CONFIG: Optional[OcrConfig] = None
logger = logging.getLogger(__name__)


def _detect_gpu() -> bool:
    if torch is not None and torch.cuda.is_available():
        logger.info("EasyOCR: Using CUDA GPU")
        return True
    if torch is not None and hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
        logger.info("EasyOCR: Using MPS (Apple Silicon GPU)")
        return True
    logger.info("EasyOCR: Using CPU (No GPU detected)")
    return False


def initialize_reader(config: Optional[OcrConfig] = None) -> None:
    """
    Load the EasyOCR detection and recognition models.

    Models are read from config.model_dir (the package's models/ directory by
    default). If download_enabled is False the models must already be there.

    Raises:
        OcrUnavailable: If easyocr is not installed or the models fail to load
    """
    global EASYOCR_READER, _READER_CONFIG

    config = config or OcrConfig()

    if not has_easyocr:
        raise OcrUnavailable("easyocr is not installed. Please install it with: pip install easyocr")

    if EASYOCR_READER is not None and _READER_CONFIG == config:
        return

    gpu = config.gpu if config.gpu is not None else _detect_gpu()
    model_dir = str(config.model_dir)

    def _load(use_gpu: bool):
        return easyocr.Reader(
            config.languages,
            gpu=use_gpu,
            model_storage_directory=model_dir,
            user_network_directory=model_dir,
            download_enabled=config.download_enabled,
            verbose=False,
        )

    try:
        EASYOCR_READER = _load(gpu)
    except Exception as e:
        if not gpu:
            raise OcrUnavailable(f"Failed to load OCR models from {model_dir}: {e}") from e
        logger.warning(f"EasyOCR: GPU initialization failed ({e}), falling back to CPU")
        try:
            EASYOCR_READER = _load(False)
        except Exception as e2:
            raise OcrUnavailable(f"Failed to load OCR models from {model_dir} (CPU fallback also failed): {e2}") from e2
    _READER_CONFIG = config


def _process_ocr_results(results: Sequence[Tuple], min_confidence: float) -> List[str]:
    """Keep confident, non-trivial lines in detector order."""
    lines = []
    for _bbox, text, confidence in results:
        if confidence < min_confidence:
            continue
        text_clean = ' '.join(text.split())
        if len(text_clean) > 1:
            lines.append(text_clean)
    return lines


def extract_text(image: Image.Image, config: Optional[OcrConfig] = None) -> List[str]:
    """
    Extract candidate text lines from a title card image.

    Args:
        image: Title card frame
        config: OCR settings (default: OcrConfig())

    Returns:
        Text lines ordered by detector position; empty if nothing was read

    Raises:
        OcrUnavailable: If the reader cannot be loaded
        OcrFailed: If the reader raises while reading the image
    """
    config = config or OcrConfig()
    if EASYOCR_READER is None or _READER_CONFIG != config:
        initialize_reader(config)

    if image.mode != 'RGB':
        image = image.convert('RGB')

    try:
        results = EASYOCR_READER.readtext(np.array(image), decoder='greedy')
    except Exception as e:
        raise OcrFailed(f"OCR failed: {e}") from e
    lines = _process_ocr_results(results, config.min_confidence)
    logger.debug(f"OCR read {len(lines)} line(s): {lines}")
    return lines


def clear_gpu_memory() -> None:
    """Release cached CUDA memory held by the reader."""
    if torch is not None and torch.cuda.is_available():
        torch.cuda.empty_cache()
