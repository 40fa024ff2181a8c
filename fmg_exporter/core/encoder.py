"""
Result encoder: turns an extractor's raw result into the transport envelope.
"""

import base64

from .domain import ExportResult, ResultEnvelope


def base64_byte_length(data: str) -> int:
    """Decoded byte length of a base64 string, computed from its length and padding"""
    if data.endswith("=="):
        padding = 2
    elif data.endswith("="):
        padding = 1
    else:
        padding = 0
    return (len(data) * 3) // 4 - padding


def encode_result(result: ExportResult) -> ResultEnvelope:
    """Wrap an ExportResult, base64-encoding text payloads as UTF-8"""
    if result.is_binary:
        payload = result.data
    else:
        payload = base64.b64encode(str(result.data).encode("utf-8")).decode("ascii")

    return ResultEnvelope(
        filename=result.filename,
        mime_type=result.mime_type,
        base64=payload,
        size_bytes=base64_byte_length(payload),
    )
