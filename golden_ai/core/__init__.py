"""
Core package initialization.
"""

from golden_ai.core.config import Settings, get_settings, settings
from golden_ai.core.exceptions import (
    AIServiceError,
    ExternalServiceError,
    GoldenAIException,
    RateLimitError,
    ResourceNotFoundError,
    ValidationError,
)
from golden_ai.core.models import (
    APIResponse,
    ContactIntent,
    MessageRole,
    WritingStyle,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "settings",
    # Exceptions
    "GoldenAIException",
    "AIServiceError",
    "ValidationError",
    "ResourceNotFoundError",
    "RateLimitError",
    "ExternalServiceError",
    # Models
    "APIResponse",
    "ContactIntent",
    "MessageRole",
    "WritingStyle",
]
