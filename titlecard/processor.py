"""Batch orchestration: scan each video, read its title card, match the catalog."""

import logging
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional, Sequence

from titlecard.catalog import Episode
from titlecard.config import DEFAULT_SCAN_CONFIG, ScanConfig
from titlecard.display import ScanProgressDisplay
from titlecard.episode_matcher import closest_episode
from titlecard.errors import ScanCancelled
from titlecard.filename import build_episode_filename
from titlecard.title_card_scanner import find_title_card, save_title_card
from titlecard.title_reader import AmbiguityResolver, TextExtractor, pick_first, read_title

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = ['*.mkv', '*.mp4', '*.avi', '*.m4v', '*.mov']


class FileResult(NamedTuple):
    path: Path
    episode: Optional[Episode]
    frame_index: Optional[int]
    title_text: Optional[str]
    error: Optional[str]


class StatusCallback:
    """Forwards per-file processing events to the progress display."""

    def __init__(self, display: Optional[ScanProgressDisplay], total_files: int, show_name: Optional[str]):
        self.display = display
        self.total_files = total_files
        self.show_name = show_name

    def file_started(self, file_index: int, file_path: Path):
        if self.display is None:
            return
        self.display.update_status(str(file_path), file_index, self.total_files, "scanning",
                                   f"Scanning {file_path.name}")
        self.display.add_log(f"Scanning {file_path.name}")

    def file_opened(self, frame_count: Optional[int]):
        if self.display is not None:
            self.display.reset_frames(frame_count)

    def frames_decoded(self, count: int):
        if self.display is not None:
            self.display.advance_frames(count)

    def status(self, file_index: int, file_path: Path, status: str, message: str):
        if self.display is None:
            return
        self.display.update_status(str(file_path), file_index, self.total_files, status, message)
        self.display.add_log(message)

    def match_found(self, file_path: Path, episode: Episode, frame_index: int):
        if self.display is None:
            return
        new_filename = None
        if self.show_name:
            new_filename = build_episode_filename(self.show_name, episode, file_path)
        self.display.add_log(f"Match found: {episode.season_and_episode} - {episode.name}")
        self.display.add_completed_file(str(file_path), episode.name, True,
                                        new_filename=new_filename, frame_index=frame_index)

    def no_match(self, file_path: Path):
        if self.display is None:
            return
        self.display.add_log(f"No title card found in {file_path.name}")
        self.display.add_completed_file(str(file_path), None, False)

    def error(self, file_path: Path, error_msg: str):
        if self.display is None:
            return
        self.display.show_error(f"{file_path.name}: {error_msg}")
        self.display.add_completed_file(str(file_path), None, False)


def collect_video_files(input_path: Path) -> List[Path]:
    """Return input_path itself if it is a file, else the video files inside it, sorted."""
    if input_path.is_file():
        return [input_path]

    video_files = set()
    for ext in VIDEO_EXTENSIONS:
        video_files.update(input_path.glob(ext))
        # Linux globbing is case sensitive
        video_files.update(input_path.glob(ext.upper()))
    return sorted(video_files)


def process_video_files(
    video_files: Sequence[Path],
    catalog: Sequence[Episode],
    extract_text: TextExtractor,
    scan_config: ScanConfig = DEFAULT_SCAN_CONFIG,
    resolve_ambiguity: AmbiguityResolver = pick_first,
    display: Optional[ScanProgressDisplay] = None,
    show_name: Optional[str] = None,
    screenshot_dir: Optional[Path] = None,
    scanner: Callable = find_title_card,
) -> List[FileResult]:
    """
    Find, read and match the title card of each video file.

    Each file is handled independently: any error raised while scanning,
    reading or matching one file is recorded in its FileResult and the
    batch moves on. Only a cancellation stops the batch.

    Args:
        video_files: Files to process, in order
        catalog: Episodes to match against
        extract_text: OCR capability returning text lines for an image
        scan_config: Sampling policy and color thresholds
        resolve_ambiguity: Picks one line when OCR returns several
        display: Optional progress display
        show_name: Used to preview new filenames in the display
        screenshot_dir: If set, matched frames are saved there as <stem>.png
        scanner: Title card finder (find_title_card signature)

    Returns:
        One FileResult per input file

    Raises:
        ScanCancelled: If the exit flag was set during a scan
    """
    callback = StatusCallback(display, len(video_files), show_name)
    results = []

    for idx, video_file in enumerate(video_files):
        callback.file_started(idx, video_file)
        try:
            match = scanner(
                video_file,
                config=scan_config,
                frame_ticker=callback.frames_decoded,
                on_open=callback.file_opened,
            )
            if match is None:
                results.append(FileResult(video_file, None, None, None, None))
                callback.no_match(video_file)
                continue

            if screenshot_dir is not None:
                saved = save_title_card(match, screenshot_dir / f"{video_file.stem}.png")
                logger.info(f"Saved title card to {saved}")

            callback.status(idx, video_file, "reading", f"Title card at frame {match.frame_index}, running OCR")
            title_text = read_title(match.image, extract_text, resolve_ambiguity)
            episode = closest_episode(title_text, catalog)
            logger.info(f"{video_file.name}: read {title_text!r}, matched {episode.season_and_episode} {episode.name!r}")

            results.append(FileResult(video_file, episode, match.frame_index, title_text, None))
            callback.match_found(video_file, episode, match.frame_index)

        except ScanCancelled:
            raise
        except Exception as e:
            logger.error(f"Error processing {video_file.name}: {e}")
            results.append(FileResult(video_file, None, None, None, str(e)))
            callback.error(video_file, str(e))

    return results
