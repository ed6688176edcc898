"""
Post translation.

Translates a post's title, excerpt and HTML body in one request, asking the
model to keep markup intact and return a JSON object.
"""

import structlog

from golden_ai.services.ai import prompts
from golden_ai.services.ai.gateway import AIGateway
from golden_ai.services.ai.models import ChatMessage, TranslatedPost, TranslationResult
from golden_ai.services.ai.parsing import parse_json_object

logger = structlog.get_logger()

TRANSLATION_MAX_TOKENS = 3000


def _field(parsed: dict, key: str, fallback: str | None) -> str:
    value = parsed.get(key)
    if isinstance(value, str) and value:
        return value
    return fallback or ""


class PostTranslator:
    def __init__(self, gateway: AIGateway):
        self.gateway = gateway

    async def translate_post(
        self,
        title: str,
        excerpt: str | None,
        content_html: str | None,
        target_language: str = "en",
    ) -> TranslationResult:
        """Translate a post into ``target_language``.

        Fields the model leaves out fall back to the source text. A reply
        with no JSON object at all yields an empty translation and no error.
        """
        messages = [
            ChatMessage.system(prompts.build_translation_system_prompt(target_language)),
            ChatMessage.user(
                prompts.build_translation_prompt(title, excerpt, content_html, target_language)
            ),
        ]
        result = await self.gateway.chat_completion(messages, max_tokens=TRANSLATION_MAX_TOKENS)

        if result.error:
            return TranslationResult(translated=TranslatedPost(), error=result.error)

        parsed = parse_json_object(result.content)
        if parsed is None:
            logger.warning(
                "ai_translation_unparseable",
                target_language=target_language,
                model=result.model_used,
            )
            return TranslationResult(translated=TranslatedPost())

        logger.info(
            "ai_translation_done",
            target_language=target_language,
            model=result.model_used,
        )
        return TranslationResult(
            translated=TranslatedPost(
                title=_field(parsed, "title", title),
                excerpt=_field(parsed, "excerpt", excerpt),
                content_html=_field(parsed, "content_html", content_html),
            )
        )
