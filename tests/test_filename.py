from pathlib import Path

from titlecard.catalog import Episode
from titlecard.filename import build_episode_filename, sanitize_filename


def test_sanitize_basic():
    assert sanitize_filename("Normal File") == "Normal File"


def test_sanitize_illegal_chars():
    for ch in '/\\:*?"<>|':
        assert sanitize_filename(f"File{ch}Name") == "File - Name"


def test_sanitize_collapse_spaces():
    assert sanitize_filename("File  Name") == "File Name"
    assert sanitize_filename("File -  - Name") == "File - Name"


def test_sanitize_trim():
    assert sanitize_filename(" File ") == "File"
    assert sanitize_filename("File.") == "File"
    assert sanitize_filename(".File") == "File"


def test_sanitize_control_characters():
    assert sanitize_filename("File\x00Name") == "FileName"
    assert sanitize_filename("File\nName") == "FileName"
    assert sanitize_filename("File\u200bName") == "FileName"


def test_sanitize_length():
    assert sanitize_filename("a" * 300) == "a" * 250


def test_sanitize_empty():
    assert sanitize_filename("") == "unnamed"
    assert sanitize_filename("   ") == "unnamed"


def test_build_episode_filename():
    episode = Episode("Sleepytime", "S01E26")
    assert build_episode_filename("Bluey", episode, Path("/videos/title_t03.mkv")) == \
        "Bluey - S01E26 - Sleepytime.mkv"


def test_build_episode_filename_sanitizes_name():
    episode = Episode("What/Why?", "S02E01")
    assert build_episode_filename("Show", episode, Path("ep.mp4")) == "Show - S02E01 - What - Why.mp4"
