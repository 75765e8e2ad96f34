"""Rename preview and execution logic."""

import logging
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence, Set

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from titlecard.catalog import Episode
from titlecard.filename import build_episode_filename
from titlecard.processor import FileResult

logger = logging.getLogger(__name__)


class RenamePlan(NamedTuple):
    source: Path
    target_name: Optional[str]  # None when the file had no match
    episode: Optional[Episode]


class RenameOutcome(NamedTuple):
    source: Path
    target: Optional[Path]
    error: Optional[str]


def generate_rename_preview(results: Sequence[FileResult], show_name: str) -> List[RenamePlan]:
    """Build one rename plan per processed file, in input order."""
    plans = []
    for result in results:
        if result.episode is None:
            plans.append(RenamePlan(result.path, None, None))
            continue
        target_name = build_episode_filename(show_name, result.episode, result.path)
        plans.append(RenamePlan(result.path, target_name, result.episode))
    return plans


def display_rename_preview(
    plans: Sequence[RenamePlan],
    show_name: str,
    console: Optional[Console] = None,
) -> None:
    """Print the rename preview as a rich table."""
    console = console or Console()
    matched_count = sum(1 for plan in plans if plan.target_name)

    console.print()
    console.print(Panel(
        f"[bold cyan]{show_name}[/bold cyan]\n"
        f"[green]{matched_count}[/green] of [yellow]{len(plans)}[/yellow] files matched",
        title="[bold]Rename Preview[/bold]",
        border_style="cyan"
    ))
    console.print()

    table = Table(show_header=True, header_style="bold cyan", border_style="dim")
    table.add_column("Original Filename", style="yellow", overflow="fold")
    table.add_column("New Filename", style="green", overflow="fold")
    table.add_column("Episode", style="dim", overflow="fold")

    for plan in plans:
        if plan.target_name:
            table.add_row(plan.source.name, plan.target_name, plan.episode.season_and_episode)
        else:
            table.add_row(plan.source.name, "[red][No match found][/red]", "")

    console.print(table)
    console.print()


def _is_same_file(a: Path, b: Path) -> bool:
    try:
        return a.samefile(b)
    except OSError:
        return False


def _resolve_unique_path(target_path: Path, source_path: Path, reserved: Set[Path]) -> Path:
    """Append " (n)" to the stem until the path is free in this batch and on disk."""
    def is_free(path: Path) -> bool:
        if path in reserved:
            return False
        # A case-only rename on a case-insensitive filesystem reports the source itself
        return not path.exists() or _is_same_file(path, source_path)

    if is_free(target_path):
        return target_path

    counter = 1
    while True:
        candidate = target_path.with_name(f"{target_path.stem} ({counter}){target_path.suffix}")
        if is_free(candidate):
            return candidate
        counter += 1


def execute_renames(plans: Sequence[RenamePlan], console: Optional[Console] = None) -> List[RenameOutcome]:
    """
    Rename matched files in place.

    A failure on one file is reported and the rest of the batch still runs.

    Returns:
        One outcome per plan that needed a rename
    """
    console = console or Console()
    to_rename = [plan for plan in plans if plan.target_name and plan.source.name != plan.target_name]

    if not to_rename:
        console.print("[yellow]No files to rename.[/yellow]")
        return []

    console.print(f"[bold]Executing {len(to_rename)} renames...[/bold]")

    outcomes = []
    reserved: Set[Path] = set()
    for plan in to_rename:
        target_path = _resolve_unique_path(plan.source.with_name(plan.target_name), plan.source, reserved)
        reserved.add(target_path)
        try:
            plan.source.rename(target_path)
        except OSError as e:
            logger.error(f"Failed to rename {plan.source}: {e}")
            console.print(f"[red]Error renaming {plan.source.name}:[/red] {e}")
            outcomes.append(RenameOutcome(plan.source, None, str(e)))
            continue

        if target_path.name != plan.target_name:
            console.print(f"[yellow]Conflict resolved:[/yellow] {plan.target_name} -> {target_path.name}")
        outcomes.append(RenameOutcome(plan.source, target_path, None))

    renamed_count = sum(1 for outcome in outcomes if outcome.error is None)
    console.print(f"\n[green]✓[/green] Renamed {renamed_count} files")
    return outcomes
