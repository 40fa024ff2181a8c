"""
Domain-Specific Exceptions

Defines the error kinds an export can fail with. Every exception carries a
context dict so the tool surface and the CLI can report what went wrong
without parsing messages.
"""

from typing import Any, Dict, List, Optional


class FMGExportError(Exception):
    """Base exception for all export engine errors"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class StartupError(FMGExportError):
    """Raised when the shared browser session cannot be started"""

    def __init__(self, message: str, remediation: Optional[str] = None, **context):
        if remediation:
            message = f"{message}. {remediation}"
        super().__init__(message, context)
        self.remediation = remediation


class ValidationError(FMGExportError):
    """Raised when a request is rejected before any browser work starts"""
    pass


class InvalidFormatError(ValidationError):
    """Raised when an unknown format id is requested"""

    def __init__(self, format_id: Any, supported_formats: Optional[List[str]] = None):
        message = f"Unsupported format: '{format_id}'"
        if supported_formats:
            message += f". Supported formats: {', '.join(supported_formats)}"
        super().__init__(message, {"format_id": format_id, "supported_formats": supported_formats or []})
        self.format_id = format_id
        self.supported_formats = supported_formats or []


class NavigationError(FMGExportError):
    """Raised when the generator page fails to load"""

    def __init__(self, message: str, url: Optional[str] = None, **context):
        super().__init__(message, dict(context, url=url))
        self.url = url


class ReadinessTimeoutError(FMGExportError):
    """Raised when the in-page generation never produced usable state"""

    def __init__(self, timeout_ms: int, missing_fields: Optional[List[str]] = None, **context):
        message = f"Map generation did not become ready within {timeout_ms} ms"
        if missing_fields:
            message += f" (missing: {', '.join(missing_fields)})"
        super().__init__(message, dict(context, timeout_ms=timeout_ms, missing_fields=missing_fields or []))
        self.timeout_ms = timeout_ms
        self.missing_fields = missing_fields or []


class ExtractionError(FMGExportError):
    """Raised when a format's extraction procedure fails"""

    def __init__(self, message: str, format_id: Optional[str] = None, **context):
        super().__init__(message, dict(context, format_id=format_id))
        self.format_id = format_id


class StaticServerError(FMGExportError):
    """Raised by the static asset server; status maps onto the HTTP response"""

    REASONS = {
        403: "Forbidden",
        404: "Not found",
        500: "Internal server error",
    }

    def __init__(self, status: int, path: Optional[str] = None):
        super().__init__(self.REASONS.get(status, "Error"), {"status": status, "path": path})
        self.status = status
        self.path = path


class ConfigurationError(FMGExportError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        if problems:
            message += ": " + "; ".join(problems)
        super().__init__(message, {"problems": problems or []})
        self.problems = problems or []


class ErrorTranslator:
    """Translates infrastructure exceptions into domain exceptions at the extraction boundary"""

    @staticmethod
    def translate_extraction_error(error: Exception, format_id: str) -> FMGExportError:
        """Wrap a foreign exception raised while extracting ``format_id``"""
        if isinstance(error, ExtractionError) and error.format_id is None:
            error.format_id = format_id
            error.context["format_id"] = format_id
        if isinstance(error, FMGExportError):
            return error
        return ExtractionError(
            f"Extraction failed for {format_id}: {error}",
            format_id=format_id,
            original_error=type(error).__name__,
        )
