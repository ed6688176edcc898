"""
Shared API models and enums.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ContactIntent(str, Enum):
    SUPPORT = "support"
    DEMO = "demo"
    QUOTE = "quote"
    GENERAL = "general"


class WritingStyle(str, Enum):
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    CONCISE = "concise"


class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(from_attributes=True)


class APIResponse(BaseSchema):
    success: bool = True
    message: str | None = None
    data: Any = None
    meta: dict[str, Any] | None = None
