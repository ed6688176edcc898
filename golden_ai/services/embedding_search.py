"""
Embedding Search Client.

Async client for the CMS semantic search endpoint
(``POST {SITE_URL}/api/embeddings/search``), which returns the website
content chunks closest to a query.
"""

import httpx
import structlog

from golden_ai.services.ai.models import SearchHit

logger = structlog.get_logger()


class EmbeddingSearchClient:
    """
    Async client for website semantic search.

    Search is an enrichment for the copilot: failures are logged and
    reported as "no hits" so the chat can continue without context.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the search client.

        Args:
            url: Full URL of the search endpoint
            timeout: Request timeout in seconds
            http_client: Shared client to use instead of a per-call one
        """
        self.url = url
        self.timeout = timeout
        self._http_client = http_client
        self.log = logger.bind(component="EmbeddingSearchClient")

    async def _post(self, payload: dict) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(self.url, json=payload, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.url, json=payload)

    async def search(self, query: str, limit: int = 3, threshold: float = 0.4) -> list[SearchHit]:
        """
        Find content chunks semantically close to ``query``.

        Args:
            query: Free-text query
            limit: Maximum number of hits
            threshold: Minimum similarity score

        Returns:
            Hits in relevance order; empty on any failure
        """
        log = self.log.bind(query=query[:50])

        try:
            response = await self._post({"query": query, "limit": limit, "threshold": threshold})
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException:
            log.warning("embedding_search_timeout")
            return []
        except httpx.HTTPError as e:
            log.warning("embedding_search_failed", error=str(e))
            return []
        except ValueError as e:
            log.warning("embedding_search_invalid_json", error=str(e))
            return []

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            log.debug("embedding_search_no_results")
            return []

        hits = [
            SearchHit(
                title=str(item.get("title") or ""),
                chunk=str(item.get("chunk") or ""),
                url=item.get("url") or None,
            )
            for item in results
            if isinstance(item, dict)
        ]
        log.debug("embedding_search_done", hits=len(hits))
        return hits[:limit]
