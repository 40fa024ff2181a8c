"""
Native save file extractor (``.map``).
"""

from ...core.domain import ExportResult
from ...core.exceptions import ExtractionError
from ...core.options import ExportOptions
from ...core.ports import GenerationSessionPort
from .base import BaseExtractor


class MapFileExtractor(BaseExtractor):
    """Generator's own serialization, as produced by its Save dialog"""

    async def extract(self, generation: GenerationSessionPort, options: ExportOptions) -> ExportResult:
        file_base = await generation.file_base()
        data = await generation.prepare_map_data()
        if not isinstance(data, str):
            raise ExtractionError("prepareMapData did not return text", format_id=self.format_id)
        return self.text_result(file_base, data)
