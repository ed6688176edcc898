"""
Application exception hierarchy.

Handlers in golden_ai.api.main map these to JSON error responses.
Provider-side AI failures are never raised; they travel in
CompletionResult.error instead.
"""

from typing import Any


class GoldenAIException(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(GoldenAIException):
    """Request data is missing or malformed."""
    pass


class ResourceNotFoundError(GoldenAIException):
    """A referenced resource (e.g. an AI profile) does not exist."""
    pass


class RateLimitError(GoldenAIException):
    """Client exceeded its request budget."""

    def __init__(self, message: str, retry_after: int = 60):
        super().__init__(message, {"retry_after": retry_after})
        self.retry_after = retry_after


class ExternalServiceError(GoldenAIException):
    """An upstream service returned an unusable answer."""
    pass


class AIServiceError(GoldenAIException):
    """The AI gateway could not produce a completion.

    Raised by route handlers when a helper reports a gateway error, so the
    fallback ledger reaches the client as a 500 response.
    """
    pass
