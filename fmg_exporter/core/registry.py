"""
Extractor registry.

Maps each format id of the catalog onto exactly one extractor. The set is
closed: registering an id outside the catalog is refused, and looking up an
unregistered id raises the same validation error an unknown format does.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .exceptions import InvalidFormatError
from .formats import FORMAT_IDS, FormatSpec, get_format
from .ports import ExtractorPort


@dataclass
class ExtractorInfo:
    """Metadata about a registered extractor"""
    format_id: str
    factory: Callable[[FormatSpec], ExtractorPort]
    family: str
    description: str = ""
    requires: List[str] = field(default_factory=list)  # in-page helpers the extractor calls


class ExtractorRegistryError(Exception):
    """Raised when registry configuration is invalid"""
    pass


class ExtractorRegistry:
    """Registry of extractors keyed by format id"""

    def __init__(self):
        self._extractors: Dict[str, ExtractorInfo] = {}

    def register_extractor(
        self,
        format_id: str,
        factory: Callable[[FormatSpec], ExtractorPort],
        family: str,
        description: str = "",
        requires: Optional[List[str]] = None,
    ) -> None:
        """
        Register an extractor for a catalog format.

        Args:
            format_id: Catalog id the extractor produces
            factory: Callable building the extractor from its FormatSpec
            family: Extractor family (vector, raster, native, json, geojson, tiles, heightmap)
            description: Human-readable description
            requires: In-page globals or helpers the extractor depends on
        """
        if format_id not in FORMAT_IDS:
            raise ExtractorRegistryError(f"'{format_id}' is not a catalog format")
        self._extractors[format_id] = ExtractorInfo(
            format_id=format_id,
            factory=factory,
            family=family,
            description=description,
            requires=requires or [],
        )

    def get_extractor(self, format_id: str) -> ExtractorPort:
        """
        Build the extractor for ``format_id``.

        Raises:
            InvalidFormatError: If the format is unknown or has no extractor
        """
        spec = get_format(format_id)
        info = self._extractors.get(spec.id)
        if info is None:
            raise InvalidFormatError(format_id, self.list_supported_formats())
        return info.factory(spec)

    def get_extractor_info(self, format_id: str) -> Optional[ExtractorInfo]:
        return self._extractors.get(format_id)

    def list_supported_formats(self) -> List[str]:
        """Registered format ids in catalog order"""
        return [format_id for format_id in FORMAT_IDS if format_id in self._extractors]

    def missing_formats(self) -> List[str]:
        """Catalog formats without an extractor"""
        return [format_id for format_id in FORMAT_IDS if format_id not in self._extractors]


def create_default_registry() -> ExtractorRegistry:
    """Registry with the built-in extractor for every catalog format"""
    # Import here to avoid circular imports
    from ..adapters.extractors import register_default_extractors

    registry = ExtractorRegistry()
    register_default_extractors(registry)
    return registry
