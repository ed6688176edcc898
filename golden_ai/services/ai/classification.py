"""
Content Classifier

Structured-output helpers: category recommendation, tag suggestion, contact
intent analysis and related-post selection.

All of them ask the model for a single JSON object and read it through
``parse_json_object``. Output that cannot be parsed produces a neutral
result without an error; only gateway failures are reported in ``error``.
IDs the model invents (not among the candidates it was shown) are dropped.
"""

from collections.abc import Sequence

import structlog

from golden_ai.core.models import ContactIntent
from golden_ai.services.ai import prompts
from golden_ai.services.ai.gateway import AIGateway
from golden_ai.services.ai.models import (
    CategoryOption,
    CategoryRecommendation,
    ChatMessage,
    CompletionResult,
    ContactIntentResult,
    PostSummary,
    RelatedContent,
    TagOption,
    TagSuggestion,
)
from golden_ai.services.ai.parsing import coerce_confidence, coerce_str_list, parse_json_object

logger = structlog.get_logger()

CATEGORY_MAX_TOKENS = 500
TAGS_MAX_TOKENS = 500
CONTACT_INTENT_MAX_TOKENS = 300
RELATED_CONTENT_MAX_TOKENS = 200

# Candidate lists are cut to bound prompt length
MAX_TAGS_IN_PROMPT = 50
MAX_POSTS_IN_PROMPT = 20

MAX_SUGGESTED_TAGS = 5
MAX_NEW_TAGS = 3

NO_CATEGORIES_ERROR = "Không có danh mục nào"


def _keep_known(ids: Sequence[str], known: set[str], limit: int | None = None) -> list[str]:
    """Filter to known ids, de-duplicated, in model order."""
    kept: list[str] = []
    for item in ids:
        if item in known and item not in kept:
            kept.append(item)
    return kept[:limit] if limit is not None else kept


class ContentClassifier:
    """Classification helpers over the AI gateway."""

    def __init__(self, gateway: AIGateway):
        self.gateway = gateway

    async def _complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> CompletionResult:
        return await self.gateway.chat_completion(
            [ChatMessage.system(system_prompt), ChatMessage.user(user_prompt)],
            max_tokens=max_tokens,
        )

    async def recommend_category(
        self,
        title: str,
        content: str,
        categories: Sequence[CategoryOption],
    ) -> CategoryRecommendation:
        """Pick the best-fitting category for a post.

        Args:
            title: Post title
            content: Post body (plain text or HTML)
            categories: Candidate categories

        Returns:
            CategoryRecommendation; ``recommended_id`` is None when the model
            answered with something unusable
        """
        if not categories:
            return CategoryRecommendation(
                recommended_id=None, confidence=0.0, reason="", error=NO_CATEGORIES_ERROR
            )

        category_lines = [
            f"- {c.name} (ID: {c.id})" + (f": {c.description}" if c.description else "")
            for c in categories
        ]
        result = await self._complete(
            prompts.CATEGORY_SYSTEM_PROMPT,
            prompts.build_category_prompt(title, content, category_lines),
            CATEGORY_MAX_TOKENS,
        )
        if result.error:
            return CategoryRecommendation(
                recommended_id=None, confidence=0.0, reason="", error=result.error
            )

        parsed = parse_json_object(result.content)
        if parsed is None:
            return CategoryRecommendation(recommended_id=None, confidence=0.0, reason="")

        category_id = parsed.get("categoryId")
        category_id = str(category_id) if category_id is not None else None
        reason = str(parsed.get("reason") or "")

        if category_id not in {c.id for c in categories}:
            logger.info("ai_category_unknown_id", category_id=category_id)
            return CategoryRecommendation(recommended_id=None, confidence=0.0, reason=reason)

        return CategoryRecommendation(
            recommended_id=category_id,
            confidence=coerce_confidence(parsed.get("confidence")),
            reason=reason,
        )

    async def suggest_tags(
        self,
        title: str,
        content: str,
        tags: Sequence[TagOption],
    ) -> TagSuggestion:
        """Suggest up to five existing tags and up to three new tag names."""
        if not tags:
            return TagSuggestion()

        shown = list(tags[:MAX_TAGS_IN_PROMPT])
        result = await self._complete(
            prompts.TAGS_SYSTEM_PROMPT,
            prompts.build_tags_prompt(title, content, [f"{t.name} (ID: {t.id})" for t in shown]),
            TAGS_MAX_TOKENS,
        )
        if result.error:
            return TagSuggestion(error=result.error)

        parsed = parse_json_object(result.content)
        if parsed is None:
            return TagSuggestion()

        suggested = _keep_known(
            coerce_str_list(parsed.get("existingTagIds")),
            {t.id for t in shown},
            MAX_SUGGESTED_TAGS,
        )
        new_tags = [t.strip() for t in coerce_str_list(parsed.get("newTags"))][:MAX_NEW_TAGS]
        return TagSuggestion(suggested_tag_ids=suggested, new_tag_suggestions=new_tags)

    async def analyze_contact_intent(
        self,
        message: str,
        subject: str | None = None,
    ) -> ContactIntentResult:
        """Classify a contact-form message as support, demo, quote or general."""
        result = await self._complete(
            prompts.CONTACT_INTENT_SYSTEM_PROMPT,
            prompts.build_contact_intent_prompt(message, subject),
            CONTACT_INTENT_MAX_TOKENS,
        )
        if result.error:
            return ContactIntentResult(
                intent=ContactIntent.GENERAL.value,
                confidence=0.0,
                suggested_response="",
                error=result.error,
            )

        parsed = parse_json_object(result.content) or {}
        try:
            intent = ContactIntent(parsed.get("intent", ContactIntent.GENERAL.value))
        except ValueError:
            intent = ContactIntent.GENERAL

        return ContactIntentResult(
            intent=intent.value,
            confidence=coerce_confidence(parsed.get("confidence")),
            suggested_response=str(parsed.get("suggestedResponse") or ""),
        )

    async def find_related_content(
        self,
        title: str,
        content: str,
        posts: Sequence[PostSummary],
    ) -> RelatedContent:
        """Choose the 3-5 posts most related to the current one."""
        if not posts:
            return RelatedContent()

        shown = list(posts[:MAX_POSTS_IN_PROMPT])
        post_lines = [f"{i}. [{p.id}] {p.title}" for i, p in enumerate(shown, start=1)]
        result = await self._complete(
            prompts.RELATED_CONTENT_SYSTEM_PROMPT,
            prompts.build_related_content_prompt(title, content, post_lines),
            RELATED_CONTENT_MAX_TOKENS,
        )
        if result.error:
            return RelatedContent(error=result.error)

        parsed = parse_json_object(result.content)
        if parsed is None:
            return RelatedContent()

        return RelatedContent(
            related_ids=_keep_known(coerce_str_list(parsed.get("ids")), {p.id for p in shown})
        )
