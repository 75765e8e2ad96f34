import io
from pathlib import Path

from rich.console import Console

from titlecard.catalog import Episode
from titlecard.processor import FileResult
from titlecard.rename_executor import (
    RenamePlan,
    display_rename_preview,
    execute_renames,
    generate_rename_preview,
)

SLEEPYTIME = Episode("Sleepytime", "S01E26")
HAMMERBARN = Episode("Hammerbarn", "S01E02")


def quiet_console():
    return Console(file=io.StringIO(), width=120)


def test_generate_rename_preview():
    results = [
        FileResult(Path("/v/t01.mkv"), SLEEPYTIME, 930, "Sleepytime", None),
        FileResult(Path("/v/t02.mkv"), None, None, None, None),
    ]
    plans = generate_rename_preview(results, "Bluey")
    assert plans == [
        RenamePlan(Path("/v/t01.mkv"), "Bluey - S01E26 - Sleepytime.mkv", SLEEPYTIME),
        RenamePlan(Path("/v/t02.mkv"), None, None),
    ]


def test_display_rename_preview_lists_files():
    console = Console(record=True, width=200)
    plans = [
        RenamePlan(Path("t01.mkv"), "Bluey - S01E26 - Sleepytime.mkv", SLEEPYTIME),
        RenamePlan(Path("t02.mkv"), None, None),
    ]
    display_rename_preview(plans, "Bluey", console=console)
    output = console.export_text()
    assert "Bluey - S01E26 - Sleepytime.mkv" in output
    assert "No match found" in output
    assert "1 of 2 files matched" in output


def test_execute_renames(tmp_path):
    source = tmp_path / "t01.mkv"
    source.write_bytes(b"video")
    outcomes = execute_renames(
        [RenamePlan(source, "Bluey - S01E26 - Sleepytime.mkv", SLEEPYTIME)],
        console=quiet_console(),
    )
    target = tmp_path / "Bluey - S01E26 - Sleepytime.mkv"
    assert target.read_bytes() == b"video"
    assert not source.exists()
    assert outcomes[0].target == target
    assert outcomes[0].error is None


def test_execute_renames_resolves_collisions(tmp_path):
    (tmp_path / "Show - S01E02 - Hammerbarn.mkv").write_bytes(b"existing")
    first = tmp_path / "a.mkv"
    second = tmp_path / "b.mkv"
    first.write_bytes(b"a")
    second.write_bytes(b"b")
    target = "Show - S01E02 - Hammerbarn.mkv"

    outcomes = execute_renames(
        [RenamePlan(first, target, HAMMERBARN), RenamePlan(second, target, HAMMERBARN)],
        console=quiet_console(),
    )

    assert (tmp_path / target).read_bytes() == b"existing"
    assert (tmp_path / "Show - S01E02 - Hammerbarn (1).mkv").read_bytes() == b"a"
    assert (tmp_path / "Show - S01E02 - Hammerbarn (2).mkv").read_bytes() == b"b"
    assert all(outcome.error is None for outcome in outcomes)


def test_execute_renames_continues_after_failure(tmp_path):
    missing = tmp_path / "missing.mkv"
    present = tmp_path / "present.mkv"
    present.write_bytes(b"x")

    outcomes = execute_renames(
        [
            RenamePlan(missing, "Show - S01E26 - Sleepytime.mkv", SLEEPYTIME),
            RenamePlan(present, "Show - S01E02 - Hammerbarn.mkv", HAMMERBARN),
        ],
        console=quiet_console(),
    )

    assert outcomes[0].error is not None
    assert outcomes[0].target is None
    assert outcomes[1].error is None
    assert (tmp_path / "Show - S01E02 - Hammerbarn.mkv").exists()


def test_execute_renames_skips_unmatched_and_unchanged(tmp_path):
    same = tmp_path / "Show - S01E02 - Hammerbarn.mkv"
    same.write_bytes(b"x")
    outcomes = execute_renames(
        [RenamePlan(tmp_path / "t.mkv", None, None), RenamePlan(same, same.name, HAMMERBARN)],
        console=quiet_console(),
    )
    assert outcomes == []
    assert same.exists()
