"""Error taxonomy.

Only conditions the caller has to act on are exceptions. "No documents" and
unparseable model output are answered in-band by the services.
"""


class DocuMindError(Exception):
    """Base class for application errors."""


class ProviderError(DocuMindError):
    """Chat completion failed: bad status, empty content, connection failure."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderTimeout(ProviderError):
    """Chat completion exceeded the connect or request timeout."""


class QAError(DocuMindError):
    """Raised when a question could not be answered."""


class AnalysisError(DocuMindError):
    """Raised when document analysis fails or returns unusable output."""


class UnsupportedFileType(DocuMindError):
    """Raised when an upload can't be turned into text."""


class AuthError(DocuMindError):
    """Invalid credentials or conflicting account."""
