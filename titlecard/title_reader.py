"""Turn the OCR lines of a title card into a single episode title."""

import logging
from typing import Callable, List, Sequence

from PIL import Image

from titlecard.errors import NoTextDetected

logger = logging.getLogger(__name__)

TextExtractor = Callable[[Image.Image], List[str]]
AmbiguityResolver = Callable[[Sequence[str]], str]


def pick_first(lines: Sequence[str]) -> str:
    """Non-interactive resolver: take the topmost line."""
    return lines[0]


def read_title(
    image: Image.Image,
    extract_text: TextExtractor,
    resolve_ambiguity: AmbiguityResolver = pick_first,
) -> str:
    """
    Read the episode title from a title card image.

    One OCR line is used as-is. Several lines are handed to resolve_ambiguity,
    which must return one of them (or any replacement text it prefers).

    Raises:
        NoTextDetected: If OCR returned no lines
    """
    lines = extract_text(image)
    if not lines:
        raise NoTextDetected("No text detected on title card")
    if len(lines) == 1:
        return lines[0]
    logger.info(f"OCR returned {len(lines)} candidate lines, resolving")
    return resolve_ambiguity(list(lines))
