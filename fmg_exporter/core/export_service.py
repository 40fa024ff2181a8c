"""
Map export service.

Runs one export end to end: validate the format, wait for the exclusive
slot, make sure the shared session is up, open a fresh browsing context,
load the generator, run the format's extractor and encode the result. The
browsing context is closed whatever happens.
"""

import logging
import time
from typing import Optional

from .domain import ExportRequest, ResultEnvelope
from .encoder import encode_result
from .exceptions import ErrorTranslator
from .options import ExportOptions
from .ports import (
    ExtractorPort,
    GenerationLoaderPort,
    ProgressReportingPort,
    SessionManagerPort,
)
from .registry import ExtractorRegistry
from .scheduler import ExclusiveScheduler

logger = logging.getLogger(__name__)

EXPORT_STEPS = 4


class MapExportService:
    """Orchestrates exports against the shared browser session"""

    def __init__(
        self,
        sessions: SessionManagerPort,
        loader: GenerationLoaderPort,
        registry: ExtractorRegistry,
        scheduler: Optional[ExclusiveScheduler] = None,
        progress: Optional[ProgressReportingPort] = None,
    ):
        """
        Initialize export service.

        Args:
            sessions: Owner of the browser process and static server
            loader: Navigates a browsing context to a ready generator page
            registry: Extractors by format id
            scheduler: Exclusive slot shared by all exports of this service
            progress: Optional progress reporter
        """
        self.sessions = sessions
        self.loader = loader
        self.registry = registry
        self.scheduler = scheduler or ExclusiveScheduler()
        self.progress = progress

    async def export(self, request: ExportRequest) -> ResultEnvelope:
        """
        Export a map.

        Validation happens before the request is queued, so an unknown format
        never touches the browser.

        Raises:
            InvalidFormatError: Unknown format id
            StartupError: Browser could not be launched
            NavigationError: Generator page failed to load
            ReadinessTimeoutError: Generation never became ready
            ExtractionError: The extractor failed
        """
        extractor = self.registry.get_extractor(request.format)
        options = ExportOptions.from_mapping(request.options)
        return await self.scheduler.run_exclusive(
            lambda: self._run_export(request, extractor, options)
        )

    async def _run_export(
        self,
        request: ExportRequest,
        extractor: ExtractorPort,
        options: ExportOptions,
    ) -> ResultEnvelope:
        start_time = time.monotonic()
        logger.info("Export started: format=%s seed=%s", request.format, request.seed or "<random>")
        if self.progress:
            self.progress.set_total_steps(EXPORT_STEPS)

        self._step("Starting browser session")
        base_url = await self.sessions.ensure_started()

        async with self.sessions.browsing_context() as context:
            self._step("Loading map generator")
            generation = await self.loader.load(context, base_url, request.seed)

            self._step(f"Extracting {request.format}")
            try:
                result = await extractor.extract(generation, options)
            except Exception as e:
                logger.warning("Extraction failed for %s: %s", request.format, e)
                translated = ErrorTranslator.translate_extraction_error(e, request.format)
                if translated is e:
                    raise
                raise translated from e

        self._step("Encoding result")
        envelope = encode_result(result)

        if self.progress:
            self.progress.update_progress(100, f"Exported {envelope.filename}")
        logger.info(
            "Export finished: %s (%d bytes) in %.2fs",
            envelope.filename,
            envelope.size_bytes,
            time.monotonic() - start_time,
        )
        return envelope

    def _step(self, message: str) -> None:
        logger.debug(message)
        if self.progress:
            self.progress.increment_step(message)
