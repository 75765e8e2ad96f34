import pytest
from PIL import Image

from titlecard.catalog import Episode
from titlecard.display import ScanProgressDisplay
from titlecard import ocr_engine
from titlecard.config import OcrConfig
from titlecard.errors import DecodeError, OcrFailed, ScanCancelled
from titlecard.processor import collect_video_files, process_video_files
from titlecard.title_card_scanner import MatchResult

CATALOG = [Episode("Sleepytime", "S01E26"), Episode("Hammerbarn", "S01E02")]
CARD = Image.new("RGB", (8, 6), (0, 0, 255))


def make_scanner(outcomes):
    """Scanner stub returning (or raising) a preset outcome per filename."""
    def scanner(media_file, config, frame_ticker, on_open):
        on_open(100)
        frame_ticker(1)
        outcome = outcomes[media_file.name]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome
    return scanner


def ocr_returning(lines):
    return lambda image: list(lines)


def test_matches_episode_from_title_card(tmp_path):
    video = tmp_path / "a.mkv"
    results = process_video_files(
        [video], CATALOG, ocr_returning(["Sleepytirne"]),
        scanner=make_scanner({"a.mkv": MatchResult(CARD, 930)}),
    )
    assert len(results) == 1
    result = results[0]
    assert result.episode == Episode("Sleepytime", "S01E26")
    assert result.frame_index == 930
    assert result.title_text == "Sleepytirne"
    assert result.error is None


def test_no_title_card_is_not_an_error(tmp_path):
    results = process_video_files(
        [tmp_path / "a.mkv"], CATALOG, ocr_returning(["x"]),
        scanner=make_scanner({"a.mkv": None}),
    )
    assert results[0].episode is None
    assert results[0].error is None


def test_errors_are_recorded_and_batch_continues(tmp_path):
    files = [tmp_path / name for name in ("a.mkv", "b.mkv", "c.mkv", "d.mkv")]
    scanner = make_scanner({
        "a.mkv": DecodeError("corrupt stream"),
        "b.mkv": PermissionError("denied"),
        "c.mkv": MatchResult(CARD, 960),
        "d.mkv": MatchResult(CARD, 990),
    })
    texts = iter([[], ["Hammerbarn"]])
    results = process_video_files(files, CATALOG, lambda image: next(texts), scanner=scanner)

    assert [r.path for r in results] == files
    assert "corrupt stream" in results[0].error
    assert "denied" in results[1].error
    assert "No text detected" in results[2].error
    assert results[3].episode == Episode("Hammerbarn", "S01E02")


def test_ocr_runtime_error_is_recorded_and_batch_continues(tmp_path):
    calls = []

    def flaky_ocr(image):
        calls.append(image)
        if len(calls) == 1:
            raise RuntimeError("CUDA out of memory")
        return ["Sleepytime"]

    files = [tmp_path / "a.mkv", tmp_path / "b.mkv"]
    results = process_video_files(
        files, CATALOG, flaky_ocr,
        scanner=make_scanner({"a.mkv": MatchResult(CARD, 930), "b.mkv": MatchResult(CARD, 960)}),
    )
    assert "CUDA out of memory" in results[0].error
    assert results[0].episode is None
    assert results[1].episode == Episode("Sleepytime", "S01E26")
    assert results[1].error is None


class ExplodingReader:
    def readtext(self, image, decoder):
        raise RuntimeError("CUDA out of memory")


def test_extract_text_wraps_reader_failures(monkeypatch):
    config = OcrConfig()
    monkeypatch.setattr(ocr_engine, "EASYOCR_READER", ExplodingReader())
    monkeypatch.setattr(ocr_engine, "_READER_CONFIG", config)
    with pytest.raises(OcrFailed, match="CUDA out of memory"):
        ocr_engine.extract_text(CARD, config)


def test_empty_catalog_is_a_per_file_error(tmp_path):
    results = process_video_files(
        [tmp_path / "a.mkv"], [], ocr_returning(["Sleepytime"]),
        scanner=make_scanner({"a.mkv": MatchResult(CARD, 930)}),
    )
    assert results[0].episode is None
    assert results[0].error


def test_cancellation_stops_the_batch(tmp_path):
    with pytest.raises(ScanCancelled):
        process_video_files(
            [tmp_path / "a.mkv", tmp_path / "b.mkv"], CATALOG, ocr_returning(["x"]),
            scanner=make_scanner({"a.mkv": ScanCancelled("stop"), "b.mkv": None}),
        )


def test_multiple_lines_use_resolver(tmp_path):
    results = process_video_files(
        [tmp_path / "a.mkv"], CATALOG, ocr_returning(["Bluey", "Hammerbarn"]),
        resolve_ambiguity=lambda lines: lines[-1],
        scanner=make_scanner({"a.mkv": MatchResult(CARD, 930)}),
    )
    assert results[0].episode.name == "Hammerbarn"


def test_screenshots_are_saved(tmp_path):
    shots = tmp_path / "shots"
    process_video_files(
        [tmp_path / "ep1.mkv"], CATALOG, ocr_returning(["Sleepytime"]),
        screenshot_dir=shots,
        scanner=make_scanner({"ep1.mkv": MatchResult(CARD, 930)}),
    )
    with Image.open(shots / "ep1.png") as saved:
        assert saved.tobytes() == CARD.tobytes()


def test_display_receives_progress(tmp_path):
    display = ScanProgressDisplay()
    process_video_files(
        [tmp_path / "a.mkv", tmp_path / "b.mkv"], CATALOG, ocr_returning(["Sleepytime"]),
        display=display,
        show_name="Bluey",
        scanner=make_scanner({"a.mkv": MatchResult(CARD, 930), "b.mkv": None}),
    )
    assert display.frames_total == 100
    assert display.frames_done == 1
    assert [f['success'] for f in display.completed_files] == [True, False]
    assert display.completed_files[0]['new_filename'] == "Bluey - S01E26 - Sleepytime.mkv"


def test_collect_video_files(tmp_path):
    for name in ("b.mkv", "a.MP4", "notes.txt", "c.avi"):
        (tmp_path / name).write_bytes(b"")
    assert [p.name for p in collect_video_files(tmp_path)] == ["a.MP4", "b.mkv", "c.avi"]


def test_collect_single_file(tmp_path):
    video = tmp_path / "episode.mkv"
    video.write_bytes(b"")
    assert collect_video_files(video) == [video]
