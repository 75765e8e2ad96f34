import pytest
from titlecard.catalog import Episode
from titlecard.episode_matcher import closest_episode, normalize_title, rank_episodes
from titlecard.errors import EpisodeNotFound

CATALOG = [
    Episode("Sleepytime", "S1E1"),
    Episode("Hammerbarn", "S1E2"),
]


def test_closest_episode_exact():
    assert closest_episode("Sleepytime", CATALOG) == Episode("Sleepytime", "S1E1")


def test_closest_episode_ocr_noise():
    assert closest_episode("Hammerbam", CATALOG).name == "Hammerbarn"
    assert closest_episode("Sleepytirne", CATALOG).name == "Sleepytime"


def test_closest_episode_case_and_punctuation():
    catalog = [Episode("Bike", "S1E3"), Episode("Keepy Uppy", "S1E4")]
    assert closest_episode("KEEPY UPPY!", catalog).name == "Keepy Uppy"
    assert closest_episode("keepy, uppy", catalog).name == "Keepy Uppy"


def test_closest_episode_always_returns_a_guess():
    assert closest_episode("Completely Unrelated Words", CATALOG) in CATALOG


def test_ties_go_to_first_catalog_entry():
    catalog = [Episode("abc", "S1E1"), Episode("abd", "S1E2"), Episode("abe", "S1E3")]
    # "abx" is one edit from all three
    assert closest_episode("abx", catalog) == catalog[0]


def test_empty_catalog_raises():
    with pytest.raises(EpisodeNotFound):
        closest_episode("Sleepytime", [])


def test_rank_episodes_orders_by_distance():
    catalog = [Episode("Hammerbarn", "S1E2"), Episode("Sleepytime", "S1E1")]
    ranked = rank_episodes("Sleepytime", catalog)
    assert ranked[0] == (Episode("Sleepytime", "S1E1"), 0)
    assert ranked[1][1] > 0


def test_normalize_title():
    assert normalize_title("  Today;  Is   Great! ") == "today is great"
