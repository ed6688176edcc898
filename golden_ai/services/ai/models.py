"""
Value types shared by the AI gateway and the task helpers.
"""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from golden_ai.core.models import MessageRole


@dataclass(frozen=True)
class ChatMessage:
    """One turn of a conversation sent to the model."""
    role: MessageRole
    content: str

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(MessageRole.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(MessageRole.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(MessageRole.ASSISTANT, content)

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class ModelResponse:
    """Outcome of a single model invocation."""
    content: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.content)


@dataclass(frozen=True)
class CompletionResult:
    """Result of a chat completion across the fallback chain.

    Either ``content`` is non-empty and ``error`` is None, or ``error``
    describes why every candidate failed.
    """
    content: str
    error: str | None = None
    model_used: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ConnectionTestResult:
    success: bool
    message: str


@dataclass(frozen=True)
class CompanyInfo:
    name: str
    phone: str
    email: str


@dataclass(frozen=True)
class ResolvedConfig:
    """Provider configuration in effect for one resolution window."""
    base_url: str
    primary_model: str
    api_key: str | None
    fallback_models: tuple[str, ...]
    profile_name: str | None
    company_info: CompanyInfo
    timestamp: float = 0.0


class AIProfile(BaseModel):
    """Admin-managed provider profile, stored as JSON in ``ai_profiles``.

    Field names follow the camelCase keys the admin UI writes.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    description: str = ""
    base_url: str = Field(default="", alias="baseUrl")
    api_key: str = Field(default="", alias="apiKey")
    model: str = ""
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @field_validator("name", "description", "base_url", "api_key", "model", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class SearchHit:
    """A content chunk returned by the embedding search service."""
    title: str
    chunk: str
    url: str | None = None


@dataclass(frozen=True)
class Source:
    title: str
    url: str


@dataclass(frozen=True)
class CopilotReply:
    content: str
    error: str | None = None
    model_used: str | None = None
    sources: list[Source] | None = None


@dataclass(frozen=True)
class CategoryOption:
    id: str
    name: str
    slug: str = ""
    description: str | None = None


@dataclass(frozen=True)
class TagOption:
    id: str
    name: str
    slug: str = ""


@dataclass(frozen=True)
class PostSummary:
    id: str
    title: str
    excerpt: str | None = None


@dataclass(frozen=True)
class CategoryRecommendation:
    recommended_id: str | None
    confidence: float
    reason: str
    error: str | None = None


@dataclass(frozen=True)
class TagSuggestion:
    suggested_tag_ids: list[str] = field(default_factory=list)
    new_tag_suggestions: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class ContactIntentResult:
    intent: str
    confidence: float
    suggested_response: str
    error: str | None = None


@dataclass(frozen=True)
class RelatedContent:
    related_ids: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class TranslatedPost:
    title: str = ""
    excerpt: str = ""
    content_html: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.excerpt or self.content_html)


@dataclass(frozen=True)
class TranslationResult:
    translated: TranslatedPost
    error: str | None = None
