"""
Port interfaces for the export engine.

These interfaces define the contracts between the core and the browser,
server and progress adapters. They keep the core free of Playwright imports
and allow easy testing with fake implementations.
"""

from typing import Any, AsyncContextManager, Dict, List, Optional, Protocol, Sequence, Tuple

from .domain import ExportResult
from .options import ExportOptions


class GenerationSessionPort(Protocol):
    """
    Read/compute access to a live, fully generated map page.

    The generator itself is an external collaborator; this port lists exactly
    the globals and helpers the extractors rely on.
    """

    async def file_base(self) -> str:
        """Base file name for artifacts (``getFileName()`` or ``"map"``)"""
        ...

    async def map_size(self) -> Tuple[float, float]:
        """``(graphWidth, graphHeight)``"""
        ...

    async def map_info(self) -> Dict[str, Any]:
        """Version, map name, size, seed and map id"""
        ...

    async def settings(self) -> Dict[str, Any]:
        """Units, scales and UI options of the current map"""
        ...

    async def shared_tables(self) -> Dict[str, Any]:
        """``mapCoordinates``, ``biomesData``, ``notes`` and ``nameBases``"""
        ...

    async def pack_snapshot(self) -> Dict[str, Any]:
        """Pack cell columns, vertex columns and higher-level collections"""
        ...

    async def grid_snapshot(self) -> Dict[str, Any]:
        """Grid cell columns, vertex columns and grid metadata"""
        ...

    async def collections(self, names: Sequence[str]) -> Dict[str, Any]:
        """Selected ``pack`` collections (features, burgs, rivers, ...)"""
        ...

    async def notes(self) -> List[Dict[str, Any]]:
        ...

    async def cell_geometry(self) -> Dict[str, Any]:
        """Per-cell vertex rings and display attributes for GeoJSON cells"""
        ...

    async def convert_point_sets(self, point_sets: Sequence[Sequence[Sequence[float]]]) -> List[List[Any]]:
        """Map map-space points to geographic coordinates, set by set"""
        ...

    async def meander_rivers(self, rivers: Sequence[Dict[str, Any]]) -> List[List[List[float]]]:
        """Refine river paths (``{cells, points}``) into meandering point lists"""
        ...

    async def render_map_url(self, kind: str, flags: Dict[str, Any]) -> str:
        """URL of a rendered full-map image (``svg``, ``png`` or ``tiles``)"""
        ...

    async def fetch_text(self, url: str) -> str:
        ...

    async def rasterize(self, url: str, width: int, height: int, mime_type: str,
                        quality: Optional[float] = None) -> str:
        """Decode ``url`` and re-encode it at the given size; returns base64"""
        ...

    async def render_tiles(self, url: str, tiles: Sequence[Dict[str, Any]],
                           width: int, height: int) -> List[str]:
        """Crop each tile rectangle out of ``url`` and encode it as PNG base64"""
        ...

    async def grid_heights(self) -> Dict[str, Any]:
        """``grid.cells.h`` plus the grid dimensions"""
        ...

    async def encode_grayscale(self, values: Sequence[int], columns: int, rows: int,
                               width: int, height: int) -> str:
        """Draw gray values on a ``columns x rows`` bitmap, upscale, encode as PNG base64"""
        ...

    async def prepare_map_data(self) -> str:
        """The generator's own ``.map`` serialization"""
        ...


class ExtractorPort(Protocol):
    """Port for one format's extraction procedure"""

    format_id: str

    async def extract(self, generation: GenerationSessionPort, options: ExportOptions) -> ExportResult:
        """
        Produce the artifact for this format from live in-page state.

        Raises:
            ExtractionError: If the in-page state cannot be shaped into the artifact
        """
        ...


class GenerationLoaderPort(Protocol):
    """Port that turns a fresh browsing context into a ready generation session"""

    async def load(self, context: Any, base_url: str, seed: Optional[str]) -> GenerationSessionPort:
        """
        Navigate to the generator and wait for it to become ready.

        Raises:
            NavigationError: If the page fails to load
            ReadinessTimeoutError: If generation never becomes ready
        """
        ...


class SessionManagerPort(Protocol):
    """Owner of the shared browser process and static asset server"""

    @property
    def is_started(self) -> bool:
        ...

    async def ensure_started(self) -> str:
        """
        Start shared resources if needed.

        Returns:
            Base URL of the static asset server

        Raises:
            StartupError: If the browser cannot be launched
        """
        ...

    def browsing_context(self) -> AsyncContextManager[Any]:
        """Fresh isolated browsing context, closed when the block exits"""
        ...

    async def close(self) -> None:
        ...


class ProgressReportingPort(Protocol):
    """Port for progress updates"""

    def update_progress(self, percent: int, message: str) -> None:
        ...

    def set_total_steps(self, total: int) -> None:
        ...

    def increment_step(self, message: str) -> None:
        ...

    def is_progress_enabled(self) -> bool:
        ...


class ConfigurationPort(Protocol):
    """Port for configuration management"""

    def get_exporter_config(self) -> Any:
        """
        Get the exporter configuration.

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        ...

    def validate_config(self) -> bool:
        ...
