"""
Golden Copilot

Customer-facing customs assistant. Answers are grounded, when possible, in
website content found through embedding search (retrieval-augmented
generation) and the sources used are returned for citation.
"""

from collections.abc import Sequence
from typing import Protocol

import structlog

from golden_ai.core.models import MessageRole
from golden_ai.services.ai import prompts
from golden_ai.services.ai.gateway import AIGateway
from golden_ai.services.ai.models import ChatMessage, CopilotReply, SearchHit, Source

logger = structlog.get_logger()

SEARCH_LIMIT = 3
SEARCH_THRESHOLD = 0.4
CONTEXT_CHUNK_CHARS = 500
HISTORY_WINDOW = 10

COPILOT_MAX_TOKENS = 1500
COPILOT_TEMPERATURE = 0.7


class ContentSearch(Protocol):
    async def search(self, query: str, limit: int, threshold: float) -> list[SearchHit]: ...


def build_context(hits: Sequence[SearchHit]) -> str:
    """Numbered context block, one entry per hit."""
    return "\n\n".join(
        f"[{i}] {hit.title}:\n{hit.chunk[:CONTEXT_CHUNK_CHARS]}"
        for i, hit in enumerate(hits, start=1)
    )


def collect_sources(hits: Sequence[SearchHit]) -> list[Source]:
    return [Source(title=hit.title, url=hit.url) for hit in hits if hit.url]


class GoldenCopilot:
    """RAG chat assistant over the AI gateway."""

    def __init__(self, gateway: AIGateway, search: ContentSearch | None = None):
        self.gateway = gateway
        self.search = search

    async def _retrieve(self, message: str) -> list[SearchHit]:
        if self.search is None:
            return []
        try:
            return await self.search.search(message, limit=SEARCH_LIMIT, threshold=SEARCH_THRESHOLD)
        except Exception as e:
            logger.warning("copilot_search_failed", error=str(e))
            return []

    async def chat(
        self,
        message: str,
        history: Sequence[ChatMessage] = (),
        use_rag: bool = True,
    ) -> CopilotReply:
        """Answer a customer message.

        Args:
            message: The new user message
            history: Prior turns, oldest first; only the last 10 are sent
            use_rag: Look up website content to ground the answer

        Returns:
            CopilotReply; ``sources`` is None when no cited hit has a URL
        """
        hits = await self._retrieve(message) if use_rag else []

        config = await self.gateway.get_config()
        system_prompt = prompts.build_copilot_system_prompt(config.company_info, build_context(hits))

        window = [
            turn for turn in history
            if turn.role in (MessageRole.USER, MessageRole.ASSISTANT)
        ][-HISTORY_WINDOW:]
        messages = [ChatMessage.system(system_prompt), *window, ChatMessage.user(message)]

        result = await self.gateway.chat_completion(
            messages,
            temperature=COPILOT_TEMPERATURE,
            max_tokens=COPILOT_MAX_TOKENS,
        )

        sources = collect_sources(hits)
        logger.info(
            "copilot_reply",
            ok=result.ok,
            model=result.model_used,
            context_hits=len(hits),
            history_turns=len(window),
        )
        return CopilotReply(
            content=result.content,
            error=result.error,
            model_used=result.model_used,
            sources=sources or None,
        )
