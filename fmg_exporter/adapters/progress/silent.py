"""
Silent Progress Adapter

No-op progress adapter for the MCP server and non-interactive runs.
"""


class SilentProgressAdapter:
    """Silent progress adapter that performs no operations"""

    def update_progress(self, percent: int, message: str) -> None:
        pass

    def set_total_steps(self, total: int) -> None:
        pass

    def increment_step(self, message: str) -> None:
        pass

    def is_progress_enabled(self) -> bool:
        """Progress reporting is disabled"""
        return False
