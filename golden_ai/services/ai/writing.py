"""
Writing Assistant

Free-text content helpers for the post editor: excerpts, meta descriptions,
outlines, titles, expansion, rewriting and image alt text. Each helper builds
its prompt and passes the gateway result through unchanged.
"""

import structlog

from golden_ai.core.models import WritingStyle
from golden_ai.services.ai import prompts
from golden_ai.services.ai.gateway import AIGateway
from golden_ai.services.ai.models import ChatMessage, CompletionResult

logger = structlog.get_logger()

EXCERPT_MAX_TOKENS = 500
META_DESCRIPTION_MAX_TOKENS = 500
OUTLINE_MAX_TOKENS = 2000
TITLE_MAX_TOKENS = 500
EXPAND_MAX_TOKENS = 800
IMPROVE_MAX_TOKENS = 1000
ALT_TEXT_MAX_TOKENS = 100


class WritingAssistant:
    """Prompt builders for editor-side writing tasks."""

    def __init__(self, gateway: AIGateway):
        self.gateway = gateway

    async def _complete(
        self,
        task: str,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
    ) -> CompletionResult:
        result = await self.gateway.chat_completion(
            [ChatMessage.system(system_prompt), ChatMessage.user(user_prompt)],
            max_tokens=max_tokens,
        )
        logger.debug("ai_writing_task_done", task=task, ok=result.ok, model=result.model_used)
        return result

    async def generate_excerpt(self, content: str, title: str) -> CompletionResult:
        return await self._complete(
            "excerpt",
            prompts.EXCERPT_SYSTEM_PROMPT,
            prompts.build_excerpt_prompt(content, title),
            EXCERPT_MAX_TOKENS,
        )

    async def generate_meta_description(self, content: str, title: str) -> CompletionResult:
        return await self._complete(
            "meta",
            prompts.META_DESCRIPTION_SYSTEM_PROMPT,
            prompts.build_meta_description_prompt(content, title),
            META_DESCRIPTION_MAX_TOKENS,
        )

    async def generate_outline(self, topic: str, keywords: str | None = None) -> CompletionResult:
        return await self._complete(
            "outline",
            prompts.OUTLINE_SYSTEM_PROMPT,
            prompts.build_outline_prompt(topic, keywords),
            OUTLINE_MAX_TOKENS,
        )

    async def suggest_title(self, current_title: str, content: str | None = None) -> CompletionResult:
        """Ask for three numbered alternative titles, one per line."""
        return await self._complete(
            "title",
            prompts.TITLE_SYSTEM_PROMPT,
            prompts.build_title_prompt(current_title, content),
            TITLE_MAX_TOKENS,
        )

    async def expand_content(self, text: str, context: str | None = None) -> CompletionResult:
        return await self._complete(
            "expand",
            prompts.EXPAND_SYSTEM_PROMPT,
            prompts.build_expand_prompt(text, context),
            EXPAND_MAX_TOKENS,
        )

    async def improve_content(
        self,
        text: str,
        style: WritingStyle = WritingStyle.PROFESSIONAL,
    ) -> CompletionResult:
        """Rewrite text in the requested tone, keeping its meaning."""
        return await self._complete(
            "improve",
            prompts.build_improve_system_prompt(WritingStyle(style)),
            prompts.build_improve_prompt(text),
            IMPROVE_MAX_TOKENS,
        )

    async def generate_alt_text(
        self,
        image_url: str,
        title: str | None = None,
        content: str | None = None,
    ) -> CompletionResult:
        return await self._complete(
            "alt_text",
            prompts.ALT_TEXT_SYSTEM_PROMPT,
            prompts.build_alt_text_prompt(image_url, title, content),
            ALT_TEXT_MAX_TOKENS,
        )
