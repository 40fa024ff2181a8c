"""
Progress reporting adapters.
"""

from .cli import CLIProgressAdapter, create_cli_progress_adapter
from .silent import SilentProgressAdapter

__all__ = ["CLIProgressAdapter", "SilentProgressAdapter", "create_cli_progress_adapter"]
