"""Nearest-episode lookup by edit distance."""

from typing import List, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

from titlecard.catalog import Episode
from titlecard.errors import EpisodeNotFound


def normalize_title(text: str) -> str:
    """Lowercase, turn punctuation OCR tends to confuse into spaces, collapse whitespace."""
    normalized = text.lower()
    # "Today;" vs "Today," vs "Today!" should compare equal
    for punct in '!?;:.,':
        normalized = normalized.replace(punct, ' ')
    return ' '.join(normalized.split())


def rank_episodes(candidate_text: str, catalog: Sequence[Episode]) -> List[Tuple[Episode, int]]:
    """
    Score every episode by Levenshtein distance to the candidate text.

    Returns:
        (episode, distance) pairs, closest first; equal distances keep
        catalog order
    """
    target = normalize_title(candidate_text)
    scored = [
        (episode, Levenshtein.distance(target, normalize_title(episode.name)))
        for episode in catalog
    ]
    return sorted(scored, key=lambda pair: pair[1])


def closest_episode(candidate_text: str, catalog: Sequence[Episode]) -> Episode:
    """
    Return the catalog entry whose name is closest to the candidate text.

    Always returns a best guess, however large the distance. Ties go to the
    entry that appears first in the catalog.

    Raises:
        EpisodeNotFound: If the catalog is empty
    """
    if not catalog:
        raise EpisodeNotFound(f"No episodes to match {candidate_text!r} against")
    return rank_episodes(candidate_text, catalog)[0][0]
