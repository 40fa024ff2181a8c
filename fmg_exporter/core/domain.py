"""
Core domain models for map exports.

These models define the requests, results and envelopes that flow through
the export engine, independent of the browser or the tool transport.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class ResultKind(Enum):
    """How an extraction result's ``data`` is encoded"""

    TEXT = "text"
    BINARY = "binary"  # data is already base64


@dataclass(frozen=True)
class ExportRequest:
    """A single export: which map (seed) in which format"""

    format: str
    seed: Optional[str] = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze options so a queued request cannot be mutated by its caller
        object.__setattr__(self, "options", MappingProxyType(dict(self.options or {})))
        if self.seed is not None:
            object.__setattr__(self, "seed", str(self.seed))


@dataclass(frozen=True)
class ExportResult:
    """Raw artifact produced by an extractor"""

    filename: str
    mime_type: str
    kind: ResultKind
    data: str

    @property
    def is_binary(self) -> bool:
        return self.kind is ResultKind.BINARY


@dataclass(frozen=True)
class ResultEnvelope:
    """Transport representation of an artifact"""

    filename: str
    mime_type: str
    base64: str
    size_bytes: int

    def to_metadata(self) -> dict:
        """Metadata block without the payload"""
        return {
            "filename": self.filename,
            "mimeType": self.mime_type,
            "sizeBytes": self.size_bytes,
        }

    def to_payload(self) -> dict:
        """Metadata plus the base64 payload"""
        payload = self.to_metadata()
        payload.update({"encoding": "base64", "data": self.base64})
        return payload

