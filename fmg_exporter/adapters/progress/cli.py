"""
CLI Progress Adapter

Progress bar for the ``fmg-export export`` command, drawn with rich on
stderr so the command's own output stays clean.
"""

import sys
from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .silent import SilentProgressAdapter


class CLIProgressAdapter:
    """Rich progress bar for one export"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self.current_task: Optional[TaskID] = None
        self.total_steps = 1
        self.current_step = 0
        self._started = False

        self.progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )

    def __enter__(self):
        self.progress.start()
        self._started = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._started:
            self.progress.stop()
            self._started = False

    def update_progress(self, percent: int, message: str) -> None:
        """Update progress with percentage and message"""
        if self.current_task is None:
            self.current_task = self.progress.add_task(message, total=100)
        self.progress.update(self.current_task, completed=percent, description=message)

    def set_total_steps(self, total: int) -> None:
        self.total_steps = max(total, 1)
        self.current_step = 0

    def increment_step(self, message: str) -> None:
        """Advance to the next step; the bar shows the steps already finished"""
        percent = int((self.current_step / self.total_steps) * 100)
        self.current_step += 1
        self.update_progress(percent, message)

    def is_progress_enabled(self) -> bool:
        return True


def create_cli_progress_adapter(progress_type: str = "auto", **kwargs):
    """
    Factory function to create appropriate CLI progress adapter.

    Args:
        progress_type: Type of progress adapter ("rich", "silent", "auto")
        **kwargs: Additional arguments for the adapter (``console``)

    Returns:
        Configured progress adapter
    """
    if progress_type == "auto":
        if sys.stderr.isatty():
            return CLIProgressAdapter(**kwargs)
        return SilentProgressAdapter()

    elif progress_type == "rich":
        return CLIProgressAdapter(**kwargs)

    elif progress_type == "silent":
        return SilentProgressAdapter()

    else:
        raise ValueError(f"Unknown progress type: {progress_type}")
