"""Filename generation for renamed episodes."""

import re
import unicodedata
from pathlib import Path

from titlecard.catalog import Episode

# Path separators and characters Windows refuses in filenames
UNSAFE_CHARS = '/\\:*?"<>|'
MAX_NAME_LENGTH = 250  # leaves room for the extension within 255


def sanitize_filename(name: str) -> str:
    """
    Make a name safe for common filesystems.

    Unsafe characters become " - ", control and format characters are
    dropped, whitespace and dash runs are collapsed, and leading/trailing
    spaces, dots and dashes are stripped. Empty results become "unnamed".
    """
    for ch in UNSAFE_CHARS:
        name = name.replace(ch, ' - ')

    # Category C covers control, format, surrogate and private-use characters
    name = ''.join(ch for ch in name if not unicodedata.category(ch).startswith('C'))
    name = unicodedata.normalize('NFKC', name)

    name = ' '.join(name.split())
    name = re.sub(r'\s*-\s*-\s*', ' - ', name)
    name = name.strip(' .-')

    if not name:
        return "unnamed"

    if len(name) > MAX_NAME_LENGTH:
        name = name[:MAX_NAME_LENGTH].rstrip(' .-')

    return name


def build_episode_filename(show_name: str, episode: Episode, source_path: Path) -> str:
    """
    Build "<Show> - <season_and_episode> - <name><ext>" for a matched file.

    The extension of source_path is kept as-is.
    """
    stem = sanitize_filename(f"{show_name} - {episode.season_and_episode} - {episode.name}")
    return f"{stem}{source_path.suffix}"
