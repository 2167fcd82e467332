"""Caching wrapper around an Embedder that stores results in SQLite."""

from __future__ import annotations

from helpdesk_kb.embeddings.cache import EmbeddingCache
from helpdesk_kb.exceptions import EmbeddingUnavailable
from helpdesk_kb.observability.logger import get_logger
from helpdesk_kb.protocols.embedder import Embedder

logger = get_logger("cached_embedder")


class CachedEmbedder:
    """Checks the cache first and only calls the delegate on a miss.

    Cache read/write failures are logged and bypassed; only the delegate can
    make `embed` fail.
    """

    def __init__(self, delegate: Embedder, cache: EmbeddingCache) -> None:
        self._delegate = delegate
        self._cache = cache

    @property
    def dimensions(self) -> int:
        return self._delegate.dimensions

    async def embed(self, text: str) -> list[float]:
        try:
            cached = await self._cache.get(text)
        except Exception as e:
            logger.warning("embedding_cache_read_failed", error=str(e))
            cached = None
        if cached:
            logger.debug("embed_cache_hit", chars=len(text))
            return cached

        embedding = await self._delegate.embed(text)
        if not embedding:
            raise EmbeddingUnavailable("Delegate embedder returned an empty vector")

        try:
            await self._cache.put(text, embedding)
        except Exception as e:
            logger.warning("embedding_cache_write_failed", error=str(e))
        logger.debug("embed_cache_miss", chars=len(text))
        return embedding
