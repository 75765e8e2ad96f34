"""Episode catalog loaded from a CSV file."""

import csv
import logging
from pathlib import Path
from typing import List, NamedTuple

from titlecard.errors import CatalogError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("name", "season")


class Episode(NamedTuple):
    name: str
    season_and_episode: str  # e.g. "S01E05"


def load_catalog(file_path: Path) -> List[Episode]:
    """
    Load episodes from a CSV file with "name" and "season" columns.

    Rows keep file order. Rows with an empty name are skipped.

    Raises:
        FileNotFoundError: If the file does not exist
        CatalogError: If a required column is missing or the CSV cannot be parsed
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {file_path}")

    episodes = []
    with open(file_path, 'r', newline='', encoding='utf-8-sig') as f:
        reader = csv.DictReader(f)
        columns = [c.strip() for c in (reader.fieldnames or [])]
        missing = [c for c in REQUIRED_COLUMNS if c not in columns]
        if missing:
            raise CatalogError(f"Catalog {file_path} is missing column(s): {', '.join(missing)}")
        reader.fieldnames = columns

        try:
            for line_number, row in enumerate(reader, start=2):
                name = (row.get("name") or "").strip()
                if not name:
                    logger.warning(f"Skipping catalog row {line_number}: empty name")
                    continue
                episodes.append(Episode(name, (row.get("season") or "").strip()))
        except csv.Error as e:
            raise CatalogError(f"Could not parse catalog {file_path}: {e}") from e

    logger.info(f"Loaded {len(episodes)} episodes from {file_path.name}")
    return episodes
