"""
Core domain layer

Contains the export requests and results, the format catalog, the
scheduling and encoding rules, and the port interfaces that are independent
of the browser and transport infrastructure.
"""

from .domain import (
    ExportRequest,
    ExportResult,
    ResultEnvelope,
    ResultKind,
)

from .formats import FormatSpec, FORMATS, FORMAT_IDS, get_format, list_formats
from .options import ExportOptions, clamp_number
from .scheduler import ExclusiveScheduler
from .encoder import encode_result, base64_byte_length
from .registry import ExtractorRegistry, create_default_registry
from .export_service import MapExportService

from .ports import (
    GenerationSessionPort,
    ExtractorPort,
    GenerationLoaderPort,
    SessionManagerPort,
    ProgressReportingPort,
    ConfigurationPort,
)

from .exceptions import (
    FMGExportError,
    StartupError,
    ValidationError,
    InvalidFormatError,
    NavigationError,
    ReadinessTimeoutError,
    ExtractionError,
    StaticServerError,
    ConfigurationError,
)

__all__ = [
    # Domain models
    'ExportRequest',
    'ExportResult',
    'ResultEnvelope',
    'ResultKind',

    # Catalog and options
    'FormatSpec',
    'FORMATS',
    'FORMAT_IDS',
    'get_format',
    'list_formats',
    'ExportOptions',
    'clamp_number',

    # Services
    'ExclusiveScheduler',
    'encode_result',
    'base64_byte_length',
    'ExtractorRegistry',
    'create_default_registry',
    'MapExportService',

    # Ports
    'GenerationSessionPort',
    'ExtractorPort',
    'GenerationLoaderPort',
    'SessionManagerPort',
    'ProgressReportingPort',
    'ConfigurationPort',

    # Exceptions
    'FMGExportError',
    'StartupError',
    'ValidationError',
    'InvalidFormatError',
    'NavigationError',
    'ReadinessTimeoutError',
    'ExtractionError',
    'StaticServerError',
    'ConfigurationError',
]
