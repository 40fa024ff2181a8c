"""
High-level exporter facade.

Wires the default components together and exposes a small async API::

    async with FmgExporter(config) as exporter:
        envelope = await exporter.export(seed="123", format="json_minimal")
"""

import logging
from typing import Any, Mapping, Optional

from .adapters.browser.loader import GenerationPageLoader
from .adapters.browser.session_manager import BrowserSessionManager
from .adapters.config import ExporterConfig
from .adapters.progress.silent import SilentProgressAdapter
from .core.domain import ExportRequest, ResultEnvelope
from .core.export_service import MapExportService
from .core.ports import ProgressReportingPort
from .core.registry import create_default_registry
from .core.scheduler import ExclusiveScheduler

logger = logging.getLogger(__name__)


class FmgExporter:
    """Exports maps from a local generator checkout"""

    def __init__(self, config: ExporterConfig, progress: Optional[ProgressReportingPort] = None):
        self.config = config
        self.sessions = BrowserSessionManager(config.repo_root, headless=config.headless)
        self.loader = GenerationPageLoader(timeout_ms=config.timeout_ms)
        self.registry = create_default_registry()
        self.scheduler = ExclusiveScheduler()
        self.service = MapExportService(
            sessions=self.sessions,
            loader=self.loader,
            registry=self.registry,
            scheduler=self.scheduler,
            progress=progress or SilentProgressAdapter(),
        )

    async def export(
        self,
        seed: Optional[Any] = None,
        format: str = "png",
        options: Optional[Mapping[str, Any]] = None,
    ) -> ResultEnvelope:
        """
        Export the map generated from ``seed`` (random when None) in ``format``.

        Raises:
            FMGExportError: Any export failure, see MapExportService.export
        """
        request = ExportRequest(format=format, seed=seed, options=options or {})
        return await self.service.export(request)

    async def close(self) -> None:
        """Close the browser and the static server; safe to call repeatedly"""
        logger.debug("Closing exporter")
        await self.sessions.close()

    async def __aenter__(self) -> "FmgExporter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
