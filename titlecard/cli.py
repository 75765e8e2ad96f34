#!/usr/bin/env python3
"""Command-line interface for titlecard."""

import argparse
import logging
import signal
import sys
from dataclasses import replace
from functools import partial
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.prompt import IntPrompt

from titlecard.catalog import load_catalog
from titlecard.config import OcrConfig, ScanConfig, load_config
from titlecard.display import ScanProgressDisplay
from titlecard.errors import ScanCancelled, TitleCardError
from titlecard.exit_flag import FORCE_EXIT
from titlecard.ocr_engine import clear_gpu_memory, extract_text, initialize_reader
from titlecard.processor import collect_video_files, process_video_files
from titlecard.rename_executor import display_rename_preview, execute_renames, generate_rename_preview
from titlecard.title_card_scanner import find_title_card, save_title_card
from titlecard.title_reader import pick_first

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def _setup_logging(level: str, console: Console):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _suppress_logging():
    """Mute package logging while the live display owns the terminal."""
    package_logger = logging.getLogger('titlecard')
    package_logger.setLevel(logging.CRITICAL)
    package_logger.handlers = [logging.NullHandler()]
    package_logger.propagate = False


def _interrupt_handler(signum, frame):
    """First Ctrl-C stops the scan at the next packet, a second one aborts."""
    if FORCE_EXIT.is_set():
        raise KeyboardInterrupt
    FORCE_EXIT.set()


def _build_configs(args) -> Tuple[ScanConfig, OcrConfig]:
    if args.config:
        scan_config, ocr_config = load_config(Path(args.config).expanduser())
    else:
        scan_config, ocr_config = ScanConfig(), OcrConfig()

    scan_overrides = {}
    if args.warmup is not None:
        scan_overrides['warmup'] = args.warmup
    if args.stride is not None:
        scan_overrides['stride'] = args.stride
    if args.min_fraction is not None:
        scan_overrides['min_fraction'] = args.min_fraction
    if scan_overrides:
        scan_config = replace(scan_config, **scan_overrides)

    if args.ocr_device == "gpu":
        ocr_config = replace(ocr_config, gpu=True)
    elif args.ocr_device == "cpu":
        ocr_config = replace(ocr_config, gpu=False)
    if args.model_dir:
        ocr_config = replace(ocr_config, model_dir=Path(args.model_dir).expanduser())
    if args.no_download:
        ocr_config = replace(ocr_config, download_enabled=False)

    return scan_config, ocr_config


def prompt_for_title(lines: Sequence[str], console: Optional[Console] = None) -> str:
    """Ask the user which OCR line is the episode title."""
    console = console or Console()
    console.print("[bold]Several lines of text were found on the title card:[/bold]")
    for number, line in enumerate(lines, start=1):
        console.print(f"  [cyan]{number}[/cyan]. {line}")
    choice = IntPrompt.ask(
        "Which line is the episode title?",
        choices=[str(n) for n in range(1, len(lines) + 1)],
        default=1,
        console=console,
    )
    return lines[choice - 1]


def _run_find(args, scan_config: ScanConfig, console: Console) -> int:
    media_file = Path(args.path).expanduser()
    output = Path(args.output).expanduser()

    if args.no_display:
        result = find_title_card(media_file, scan_config)
    else:
        with Progress(
            TextColumn("[bold cyan]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task(f"Scanning {media_file.name}", total=None)
            result = find_title_card(
                media_file,
                scan_config,
                frame_ticker=lambda count: progress.advance(task, count),
                on_open=lambda total: progress.update(task, total=total),
            )

    if result is None:
        logger.info("No title card found")
        return EXIT_OK

    logger.info(f"Found a title card at frame {result.frame_index}")
    save_title_card(result, output)
    logger.info(f"Saved frame to {output}")
    return EXIT_OK


def _run_rename(args, scan_config: ScanConfig, ocr_config: OcrConfig, console: Console) -> int:
    catalog_path = Path(args.catalog).expanduser()
    catalog = load_catalog(catalog_path)
    if not catalog:
        console.print(f"[red]Error:[/red] Catalog {catalog_path} contains no episodes")
        return EXIT_ERROR

    input_path = Path(args.input).expanduser()
    if not input_path.exists():
        console.print(f"[red]Error:[/red] Input path not found: {input_path}")
        return EXIT_ERROR

    video_files = collect_video_files(input_path)
    if not video_files:
        console.print(f"[red]Error:[/red] No video files found in {input_path} (checked mkv, mp4, avi, m4v, mov)")
        return EXIT_ERROR

    # Model loading failures are fatal before any file is scanned
    initialize_reader(ocr_config)

    resolve_ambiguity = partial(prompt_for_title, console=console) if args.interactive else pick_first
    screenshot_dir = Path(args.save_frames).expanduser() if args.save_frames else None

    display = None
    # The interactive prompt needs the terminal, so no live display with it
    if not args.no_display and not args.interactive:
        _suppress_logging()
        display = ScanProgressDisplay(console=console)
        display.start()

    try:
        results = process_video_files(
            video_files,
            catalog,
            extract_text=partial(extract_text, config=ocr_config),
            scan_config=scan_config,
            resolve_ambiguity=resolve_ambiguity,
            display=display,
            show_name=args.show,
            screenshot_dir=screenshot_dir,
            scanner=find_title_card,
        )
    finally:
        if display:
            display.stop()
        clear_gpu_memory()

    for result in results:
        if result.error:
            console.print(f"[red]✗[/red] {result.path.name}: {result.error}")

    plans = generate_rename_preview(results, args.show)
    display_rename_preview(plans, args.show, console=console)

    if args.dry_run:
        return EXIT_OK

    outcomes = execute_renames(plans, console=console)
    return EXIT_ERROR if any(outcome.error for outcome in outcomes) else EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="titlecard",
        description="Find title card frames in videos and rename episodes from their titles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Save the title card of one episode:
  titlecard find --path episode.mkv --output title.png

  # Rename every episode in a directory using a CSV catalog:
  titlecard rename --input ~/videos/season1/ --catalog episodes.csv --show "Bluey"

  # Preview only, asking when several lines of text are found:
  titlecard rename --input ~/videos/ --catalog episodes.csv --show "Bluey" --dry-run --interactive
        """
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=str, default=None, help="JSON file with \"scan\" and \"ocr\" settings")
    common.add_argument("--log-level", type=str, default="INFO", help="Logging level (default: INFO)")
    common.add_argument("--no-display", action="store_true", help="Disable the live progress display")
    common.add_argument("--warmup", type=int, default=None, help="Frames to skip before sampling (default: 900)")
    common.add_argument("--stride", type=int, default=None, help="Classify every Nth frame after warmup (default: 30)")
    common.add_argument("--min-fraction", type=float, default=None,
                        help="Fraction of blue pixels a title card must exceed (default: 0.8)")
    common.add_argument("--ocr-device", type=str, default="auto", choices=["auto", "gpu", "cpu"],
                        help="Force OCR device usage (default: auto)")
    common.add_argument("--model-dir", type=str, default=None, help="Directory holding the OCR model files")
    common.add_argument("--no-download", action="store_true", help="Fail instead of downloading missing OCR models")

    subparsers = parser.add_subparsers(dest="command", required=True)

    find_parser = subparsers.add_parser("find", parents=[common], help="Find the title card in one video")
    find_parser.add_argument("-p", "--path", type=str, required=True, help="Video file to scan")
    find_parser.add_argument("-o", "--output", type=str, required=True, help="Image file to write the frame to")

    rename_parser = subparsers.add_parser("rename", parents=[common], help="Identify and rename episodes")
    rename_parser.add_argument("--input", type=str, required=True, help="Video file or directory of video files")
    rename_parser.add_argument("--catalog", type=str, required=True, help="CSV file with name and season columns")
    rename_parser.add_argument("--show", type=str, required=True, help="Show name used in new filenames")
    rename_parser.add_argument("--dry-run", action="store_true", help="Preview renames without executing")
    rename_parser.add_argument("--interactive", action="store_true",
                               help="Ask which line to use when OCR finds several")
    rename_parser.add_argument("--save-frames", type=str, default=None,
                               help="Directory to save matched title card frames to")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = _build_parser().parse_args(argv)

    console = Console(stderr=True)
    _setup_logging(args.log_level, console)

    # A cancelled earlier run in this process must not cancel this one
    FORCE_EXIT.clear()
    previous_handler = signal.signal(signal.SIGINT, _interrupt_handler)
    try:
        scan_config, ocr_config = _build_configs(args)
        if args.command == "find":
            return _run_find(args, scan_config, console)
        return _run_rename(args, scan_config, ocr_config, console)
    except KeyboardInterrupt:
        FORCE_EXIT.set()
        return EXIT_INTERRUPTED
    except ScanCancelled as e:
        console.print(f"[yellow]{e}[/yellow]")
        return EXIT_INTERRUPTED
    except (TitleCardError, OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return EXIT_ERROR
    finally:
        signal.signal(signal.SIGINT, previous_handler)


if __name__ == "__main__":
    sys.exit(main())
