"""
AI Assist API Routes

Endpoints used by the CMS editor, the contact form and the public chat
widget. Handlers validate input, call one helper and translate a gateway
failure into an error response.

Routes:
- POST /chat              - Golden Copilot (public, rate limited per IP)
- POST /content           - Writing helpers (excerpt, meta, outline, ...)
- POST /classify          - Category recommendation / tag suggestion
- POST /contact-intent    - Contact form intent analysis
- POST /related-content   - Related post selection
- POST /alt-text          - Image alt text
- POST /translate         - Post translation
- POST /validate-schema   - JSON-LD validation (no AI call)
- POST /seo-check         - On-page SEO score (no AI call)
- POST /test              - Connectivity test for an unsaved profile
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Literal

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from golden_ai.api.deps import (
    get_ai_gateway,
    get_classifier,
    get_copilot,
    get_translator,
    get_writing_assistant,
    rate_limit_chat,
    rate_limit_content,
)
from golden_ai.api.middleware import add_ai_call_to_wide_event
from golden_ai.core.exceptions import AIServiceError, ExternalServiceError, ValidationError
from golden_ai.core.models import APIResponse, WritingStyle
from golden_ai.services.ai.classification import ContentClassifier
from golden_ai.services.ai.copilot import HISTORY_WINDOW, GoldenCopilot
from golden_ai.services.ai.gateway import AIGateway
from golden_ai.services.ai.models import (
    CategoryOption,
    ChatMessage,
    CompletionResult,
    PostSummary,
    TagOption,
)
from golden_ai.services.ai.translation import PostTranslator
from golden_ai.services.ai.writing import WritingAssistant
from golden_ai.services.seo import check_seo, validate_schema

logger = structlog.get_logger()

router = APIRouter()

MAX_CHAT_MESSAGE_CHARS = 2000


# ============================================================================
# Request Models
# ============================================================================

class HistoryTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Message to the Golden Copilot."""
    message: str = ""
    history: list[HistoryTurn] = Field(default_factory=list)
    use_rag: bool = True
    session_id: str | None = None


class ContentRequest(BaseModel):
    """Writing helper request; which fields are needed depends on action."""
    action: Literal["excerpt", "meta", "outline", "title", "expand", "improve"]
    title: str | None = None
    content: str | None = None
    topic: str | None = None
    keywords: str | None = None
    text: str | None = None
    context: str | None = None
    style: WritingStyle = WritingStyle.PROFESSIONAL


class CategoryIn(BaseModel):
    id: str
    name: str
    slug: str = ""
    description: str | None = None


class TagIn(BaseModel):
    id: str
    name: str
    slug: str = ""


class PostIn(BaseModel):
    id: str
    title: str
    excerpt: str | None = None


class ClassifyRequest(BaseModel):
    action: Literal["category", "tags"]
    title: str = ""
    content: str = ""
    categories: list[CategoryIn] | None = None
    tags: list[TagIn] | None = None


class ContactIntentRequest(BaseModel):
    message: str = ""
    subject: str | None = None


class RelatedContentRequest(BaseModel):
    title: str = ""
    content: str = ""
    posts: list[PostIn] = Field(default_factory=list)
    limit: int = Field(default=5, ge=1, le=20)


class AltTextRequest(BaseModel):
    image_url: str = ""
    title: str | None = None
    content: str | None = None


class TranslateRequest(BaseModel):
    title: str
    excerpt: str | None = None
    content_html: str | None = None
    target_language: str = "en"


class SchemaValidateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_data: dict[str, Any] | None = Field(default=None, alias="schema")
    type: str | None = None


class SEOCheckRequest(BaseModel):
    title: str | None = None
    meta_description: str | None = None
    content: str | None = None
    excerpt: str | None = None


class ConnectionTestRequest(BaseModel):
    base_url: str | None = None
    api_key: str | None = None
    model: str = ""


# ============================================================================
# Helpers
# ============================================================================

def _require(message: str, *values: str | None) -> None:
    if not all(v and v.strip() for v in values):
        raise ValidationError(message)


def _completion_response(task: str, result: CompletionResult) -> APIResponse:
    add_ai_call_to_wide_event(task, result.model_used, result.error)
    if result.error:
        raise AIServiceError(result.error, {"task": task})
    return APIResponse(
        success=True,
        data={"content": result.content, "model_used": result.model_used},
    )


# ============================================================================
# Copilot
# ============================================================================

@router.post("/chat", dependencies=[Depends(rate_limit_chat)])
async def chat(
    request: ChatRequest,
    copilot: Annotated[GoldenCopilot, Depends(get_copilot)],
) -> APIResponse:
    """Chat with the Golden Copilot customs assistant."""
    message = request.message.strip()
    if not message:
        raise ValidationError("Vui lòng nhập tin nhắn")
    if len(message) > MAX_CHAT_MESSAGE_CHARS:
        raise ValidationError(
            f"Tin nhắn quá dài. Tối đa {MAX_CHAT_MESSAGE_CHARS} ký tự.",
            {"max_chars": MAX_CHAT_MESSAGE_CHARS},
        )

    history = [
        ChatMessage.user(turn.content) if turn.role == "user" else ChatMessage.assistant(turn.content)
        for turn in request.history[-HISTORY_WINDOW:]
    ]
    reply = await copilot.chat(message, history, use_rag=request.use_rag)

    add_ai_call_to_wide_event("copilot", reply.model_used, reply.error)
    if reply.error:
        raise AIServiceError(reply.error, {"task": "copilot"})

    return APIResponse(
        success=True,
        data={
            "content": reply.content,
            "model_used": reply.model_used,
            "sources": [{"title": s.title, "url": s.url} for s in reply.sources or []] or None,
            "session_id": request.session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# ============================================================================
# Writing helpers
# ============================================================================

@router.post("/content", dependencies=[Depends(rate_limit_content)])
async def generate_content(
    request: ContentRequest,
    assistant: Annotated[WritingAssistant, Depends(get_writing_assistant)],
) -> APIResponse:
    """Run one writing helper selected by ``action``."""
    if request.action == "excerpt":
        _require("Cần có tiêu đề và nội dung", request.title, request.content)
        result = await assistant.generate_excerpt(request.content, request.title)
    elif request.action == "meta":
        _require("Cần có tiêu đề và nội dung", request.title, request.content)
        result = await assistant.generate_meta_description(request.content, request.title)
    elif request.action == "outline":
        _require("Cần có chủ đề", request.topic)
        result = await assistant.generate_outline(request.topic, request.keywords)
    elif request.action == "title":
        _require("Cần có tiêu đề", request.title)
        result = await assistant.suggest_title(request.title, request.content)
    elif request.action == "expand":
        _require("Cần có đoạn văn cần mở rộng", request.text)
        result = await assistant.expand_content(request.text, request.context)
    else:
        _require("Cần có đoạn văn cần viết lại", request.text)
        result = await assistant.improve_content(request.text, request.style)

    return _completion_response(request.action, result)


@router.post("/alt-text", dependencies=[Depends(rate_limit_content)])
async def generate_alt_text(
    request: AltTextRequest,
    assistant: Annotated[WritingAssistant, Depends(get_writing_assistant)],
) -> APIResponse:
    _require("Image URL is required", request.image_url)
    result = await assistant.generate_alt_text(request.image_url, request.title, request.content)
    return _completion_response("alt_text", result)


# ============================================================================
# Classification
# ============================================================================

@router.post("/classify", dependencies=[Depends(rate_limit_content)])
async def classify(
    request: ClassifyRequest,
    classifier: Annotated[ContentClassifier, Depends(get_classifier)],
) -> APIResponse:
    """Recommend a category or suggest tags for a post."""
    _require("Cần có tiêu đề và nội dung để phân tích", request.title, request.content)

    if request.action == "category":
        if not request.categories:
            raise ValidationError("Cần danh sách categories")
        categories = [
            CategoryOption(c.id, c.name, c.slug or c.name.lower().replace(" ", "-"), c.description)
            for c in request.categories
        ]
        recommendation = await classifier.recommend_category(request.title, request.content, categories)
        add_ai_call_to_wide_event("category", error=recommendation.error)
        if recommendation.error:
            raise AIServiceError(recommendation.error, {"task": "category"})

        return APIResponse(
            success=True,
            message=None if recommendation.recommended_id else "AI không tìm thấy danh mục phù hợp",
            data={
                "recommended_id": recommendation.recommended_id,
                "confidence": recommendation.confidence,
                "reason": recommendation.reason,
            },
        )

    if not request.tags:
        raise ValidationError("Cần danh sách tags")
    tags = [TagOption(t.id, t.name, t.slug or t.name.lower().replace(" ", "-")) for t in request.tags]
    suggestion = await classifier.suggest_tags(request.title, request.content, tags)
    add_ai_call_to_wide_event("tags", error=suggestion.error)
    if suggestion.error:
        raise AIServiceError(suggestion.error, {"task": "tags"})

    found = suggestion.suggested_tag_ids or suggestion.new_tag_suggestions
    return APIResponse(
        success=True,
        message=None if found else "AI không tìm thấy tags phù hợp. Thử nhập nội dung dài hơn.",
        data={
            "suggested_tag_ids": suggestion.suggested_tag_ids,
            "new_tag_suggestions": suggestion.new_tag_suggestions,
        },
    )


@router.post("/contact-intent")
async def contact_intent(
    request: ContactIntentRequest,
    classifier: Annotated[ContentClassifier, Depends(get_classifier)],
) -> APIResponse:
    _require("Message is required", request.message)
    result = await classifier.analyze_contact_intent(request.message, request.subject)
    add_ai_call_to_wide_event("contact_intent", error=result.error)
    if result.error:
        raise AIServiceError(result.error, {"task": "contact_intent"})

    return APIResponse(
        success=True,
        data={
            "intent": result.intent,
            "confidence": result.confidence,
            "suggested_response": result.suggested_response,
        },
    )


@router.post("/related-content")
async def related_content(
    request: RelatedContentRequest,
    classifier: Annotated[ContentClassifier, Depends(get_classifier)],
) -> APIResponse:
    """Pick related posts; on AI failure fall back to the newest candidates."""
    _require("Title is required", request.title)
    if not request.posts:
        return APIResponse(success=True, data={"related_posts": [], "source": "none"})

    posts = [PostSummary(p.id, p.title, p.excerpt) for p in request.posts]
    result = await classifier.find_related_content(request.title, request.content, posts)
    add_ai_call_to_wide_event("related_content", error=result.error)

    if result.error:
        logger.warning("related_content_fallback", error=result.error[:200])
        return APIResponse(
            success=True,
            data={
                "related_posts": [p.model_dump() for p in request.posts[: request.limit]],
                "source": "fallback",
            },
        )

    related = [p.model_dump() for p in request.posts if p.id in result.related_ids]
    return APIResponse(
        success=True,
        data={"related_posts": related[: request.limit], "source": "ai"},
    )


# ============================================================================
# Translation
# ============================================================================

@router.post("/translate", dependencies=[Depends(rate_limit_content)])
async def translate(
    request: TranslateRequest,
    translator: Annotated[PostTranslator, Depends(get_translator)],
) -> APIResponse:
    _require("Title is required", request.title)
    result = await translator.translate_post(
        request.title,
        request.excerpt,
        request.content_html,
        request.target_language,
    )
    add_ai_call_to_wide_event("translate", error=result.error)
    if result.error:
        raise AIServiceError(result.error, {"task": "translate"})
    if result.translated.is_empty:
        raise ExternalServiceError(
            "Failed to parse translation response",
            {"target_language": request.target_language},
        )

    return APIResponse(
        success=True,
        data={
            "target_language": request.target_language,
            "title": result.translated.title,
            "excerpt": result.translated.excerpt,
            "content_html": result.translated.content_html,
        },
    )


# ============================================================================
# Local checks
# ============================================================================

@router.post("/validate-schema")
async def validate_schema_endpoint(request: SchemaValidateRequest) -> APIResponse:
    if not request.schema_data:
        raise ValidationError("Vui lòng cung cấp dữ liệu schema hợp lệ")
    result = validate_schema(request.schema_data, request.type)
    return APIResponse(success=True, data=result.to_dict())


@router.post("/seo-check")
async def seo_check(request: SEOCheckRequest) -> APIResponse:
    result = check_seo(
        title=request.title,
        meta_description=request.meta_description,
        content=request.content,
        excerpt=request.excerpt,
    )
    return APIResponse(success=True, data=result.to_dict())


# ============================================================================
# Connectivity test
# ============================================================================

@router.post("/test")
async def test_connection(
    request: ConnectionTestRequest,
    gateway: Annotated[AIGateway, Depends(get_ai_gateway)],
):
    """Ping a provider with unsaved credentials before saving a profile."""
    if not request.api_key:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Missing API Key"},
        )

    result = await gateway.test_connection(request.base_url, request.api_key, request.model)
    add_ai_call_to_wide_event("connection_test", request.model, None if result.success else result.message)
    return APIResponse(success=result.success, message=result.message)
