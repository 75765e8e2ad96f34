"""Live progress display for title card scans using rich."""

import threading
import time
from collections import deque
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.text import Text


def _format_elapsed(elapsed: float) -> str:
    if elapsed < 60:
        return f"{elapsed:.1f}s"
    if elapsed < 3600:
        return f"{int(elapsed // 60)}m {int(elapsed % 60)}s"
    return f"{int(elapsed // 3600)}h {int((elapsed % 3600) // 60)}m"


class ScanProgressDisplay:
    """Status, frame progress, activity log and results for a batch scan."""

    def __init__(self, console: Optional[Console] = None):
        self.lock = threading.Lock()

        # State
        self.current_file: Optional[str] = None
        self.current_file_index = 0
        self.total_files = 0
        self.status = "Waiting..."
        self.message = ""
        self.log: deque = deque(maxlen=100)
        self.frames_done = 0
        self.frames_total: Optional[int] = None

        # Results
        self.completed_files: List[Dict] = []

        # Timing
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

        # UI
        self.console = console or Console()
        self.live: Optional[Live] = None
        self.activity_log_max_lines = 10

    def update_status(self, file: str, index: int, total: int, status: str, message: str = ""):
        """Update processing status."""
        with self.lock:
            self.current_file = file
            self.current_file_index = index
            self.total_files = total
            self.status = status
            if message:
                self.message = message

    def reset_frames(self, total: Optional[int]):
        """Start frame progress for a new file; total is None when unknown."""
        with self.lock:
            self.frames_done = 0
            self.frames_total = total

    def advance_frames(self, count: int = 1):
        with self.lock:
            self.frames_done += count

    def add_log(self, message: str):
        """Add a message to the activity log."""
        with self.lock:
            self.log.append(f"[{time.strftime('%H:%M:%S')}] {message}")

    def add_completed_file(
        self,
        file: str,
        episode: Optional[str],
        success: bool,
        new_filename: Optional[str] = None,
        frame_index: Optional[int] = None
    ):
        """Add a completed file to the summary."""
        with self.lock:
            self.completed_files.append({
                'file': file,
                'episode': episode,
                'success': success,
                'new_filename': new_filename,
                'frame_index': frame_index,
            })

    def show_error(self, error_message: str):
        self.add_log(f"ERROR: {error_message}")

    def _status_panel(self) -> Panel:
        with self.lock:
            text = Text()
            text.append(" Scan Status ", style="bold green on dark_blue")
            text.append(" (Press Ctrl+C to cancel)\n\n", style="dim")
            text.append("File: ", style="dim")
            if self.current_file:
                text.append(
                    f"{self.current_file_index + 1}/{self.total_files}: {Path(self.current_file).name}\n",
                    style="bright_white"
                )
            else:
                text.append(f"-/{self.total_files}: -\n", style="bright_white")
            text.append("Status: ", style="dim")
            text.append(f"{self.status}\n", style="bright_white")
            if self.message:
                text.append(f"{self.message}\n", style="dim")

            frames_label = f"{self.frames_done} frames"
            if self.frames_total:
                frames_label += f" / {self.frames_total}"
            text.append(f"\n{frames_label}\n", style="dim")
            bar = ProgressBar(total=self.frames_total, completed=self.frames_done)

        return Panel(Group(text, bar), title="Status", border_style="green")

    def _log_panel(self) -> Panel:
        with self.lock:
            text = Text()
            if self.log:
                for msg in reversed(list(self.log)[-self.activity_log_max_lines:]):
                    text.append(f"{msg}\n", style="dim")
            else:
                text.append("No activity yet...\n", style="dim")
        return Panel(text, title="Activity Log", border_style="blue")

    def _summary_panel(self) -> Panel:
        with self.lock:
            text = Text()
            matched = sum(1 for f in self.completed_files if f['success'])
            text.append("Completed: ", style="dim")
            text.append(f"{len(self.completed_files)}/{self.total_files}", style="bright_white")
            text.append("  Matched: ", style="dim")
            text.append(f"{matched}", style="green")

            if self.start_time is not None:
                elapsed = (self.end_time or time.time()) - self.start_time
                text.append("  Elapsed: ", style="dim")
                text.append(_format_elapsed(elapsed), style="bright_white")
            text.append("\n\n")

            for result in reversed(self.completed_files):
                name = Path(result['file']).name
                if result['success']:
                    text.append("✓ ", style="green")
                    text.append(f"{name}", style="bright_white")
                    text.append(f" @ frame {result['frame_index']}\n", style="dim")
                    text.append(f"  → {result['new_filename'] or result['episode']}\n", style="cyan")
                else:
                    text.append("✗ ", style="red")
                    text.append(f"{name}\n", style="bright_white")

        return Panel(text, title="Matches", border_style="cyan")

    def _create_layout(self) -> Layout:
        layout = Layout()
        layout.split_column(
            Layout(self._status_panel(), size=10),
            Layout(self._log_panel(), size=12),
            Layout(self._summary_panel()),
        )
        return layout

    def start(self):
        """Start the live display."""
        self.start_time = time.time()
        self.live = Live(
            get_renderable=self._create_layout,
            refresh_per_second=4,
            console=self.console,
            screen=False,
        )
        self.live.start()

    def stop(self):
        """Stop the live display; safe to call more than once."""
        if self.end_time is None:
            self.end_time = time.time()
        if self.live is not None:
            self.live.stop()
            self.live = None
