"""
Error taxonomy for the mockup generation pipeline.

Every fatal failure of a request is one of these; the request service turns
them into a uniform failure response. A response with no parsable designs is
not an error (see ``pipeline.parsing``).
"""

from typing import Optional


class MockupError(Exception):
    """Base class for all request-fatal errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(MockupError):
    """Missing credential or unsupported provider. Raised before any call is made."""

    status_code = 500


class ValidationError(MockupError):
    """Rejected input: disallowed file type, empty request, oversized document."""

    status_code = 400


class ExtractionError(MockupError):
    """Text could not be extracted from an uploaded Word document."""

    status_code = 422


class ServiceError(MockupError):
    """The generation service failed (auth, quota, timeout, bad request)."""

    status_code = 502
