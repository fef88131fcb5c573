"""Exceptions raised by the rendering core and its collaborators."""

from typing import List, Optional


class CVMakerError(Exception):
    """Base class for all CV Maker errors."""


class RenderFailure(CVMakerError):
    """
    Raised when a CV record cannot be rendered at all.

    Attributes:
        message: Error description
        issues: Problems found while trying to salvage the record
    """

    def __init__(self, message: str, issues: Optional[List[str]] = None):
        self.message = message
        self.issues = issues or []
        parts = [message]
        if self.issues:
            parts.extend(f"  - {issue}" for issue in self.issues)
        super().__init__("\n".join(parts))


class ExportFailure(CVMakerError):
    """
    Raised when PDF generation fails.

    Attributes:
        message: Error description
        retryable: Whether the caller may retry the export
    """

    retryable = True

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ExportTimeoutError(ExportFailure):
    """Raised when PDF generation does not finish within the time limit."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"PDF generation timed out after {timeout:g}s")


class StorageFailure(CVMakerError):
    """Raised when the storage adapter cannot read or write a record."""


class AssistantFailure(CVMakerError, RuntimeError):
    """Raised when the AI assistant service is unreachable or erroring."""


class UnknownTemplateError(ValueError):
    """Raised when selecting a template id that is not in the registry."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Unknown template: {template_id}")
