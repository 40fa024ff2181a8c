"""
Shared pieces of the format extractors.
"""

import json
import math
from typing import Any

from ...core.domain import ExportResult, ResultKind
from ...core.formats import FormatSpec


def json_safe(value: Any) -> Any:
    """Replace non-finite floats with None, the way JSON.stringify emits null"""
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value]
    return value


def to_json(payload: Any) -> str:
    """Compact JSON text for an export payload"""
    return json.dumps(json_safe(payload), separators=(",", ":"), ensure_ascii=False)


class BaseExtractor:
    """Base class binding an extractor to its catalog entry"""

    def __init__(self, spec: FormatSpec):
        self.spec = spec

    @property
    def format_id(self) -> str:
        return self.spec.id

    def text_result(self, file_base: str, data: str) -> ExportResult:
        return ExportResult(
            filename=self.spec.filename_for(file_base),
            mime_type=self.spec.mime_type,
            kind=ResultKind.TEXT,
            data=data,
        )

    def binary_result(self, file_base: str, base64_data: str) -> ExportResult:
        return ExportResult(
            filename=self.spec.filename_for(file_base),
            mime_type=self.spec.mime_type,
            kind=ResultKind.BINARY,
            data=base64_data,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.format_id!r})"
