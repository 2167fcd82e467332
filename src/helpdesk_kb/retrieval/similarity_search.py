"""Cosine similarity search over stored questions, with citation resolution."""

from __future__ import annotations

import asyncio

import numpy as np

from helpdesk_kb.config.constants import (
    DEFAULT_SEARCH_LIMIT,
    MISSING_CONTENT,
    SIMILARITY_THRESHOLD,
    UNKNOWN_USER,
)
from helpdesk_kb.exceptions import EmbeddingUnavailable
from helpdesk_kb.models.domain import CitationDetail, SimilaritySearchResult
from helpdesk_kb.observability.logger import get_logger
from helpdesk_kb.observability.metrics import log_search_metrics
from helpdesk_kb.protocols.embedder import Embedder
from helpdesk_kb.protocols.stores import CitationStore, QuestionStore
from helpdesk_kb.vectorstore.faiss_index import FAISSQuestionIndex

logger = get_logger("similarity_search")


def select_similar(
    scored: list[tuple[str, float]],
    threshold: float = SIMILARITY_THRESHOLD,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[tuple[str, float]]:
    """Keep scores strictly above `threshold`, best first, at most `limit`."""
    eligible = [(qid, score) for qid, score in scored if score > threshold]
    eligible.sort(key=lambda item: item[1], reverse=True)
    return eligible[:limit]


class SimilaritySearch:
    def __init__(
        self,
        index: FAISSQuestionIndex,
        question_store: QuestionStore,
        citation_store: CitationStore,
        embedder: Embedder | None = None,
    ) -> None:
        self._index = index
        self._questions = question_store
        self._citations = citation_store
        self._embedder = embedder

    async def search(
        self, query_embedding: list[float], limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[SimilaritySearchResult]:
        await self._catch_up()
        scored = self._index.search(np.array(query_embedding, dtype=np.float32), limit)
        selected = select_similar(scored, SIMILARITY_THRESHOLD, limit)
        if not selected:
            log_search_metrics(limit, [s for _, s in scored], 0)
            return []

        rows = await self._questions.get_questions_by_ids([qid for qid, _ in selected])
        candidates = [(rows[qid], score) for qid, score in selected if qid in rows]
        details = await asyncio.gather(
            *(self._citation_details(row.citation_ids) for row, _ in candidates)
        )

        results = [
            SimilaritySearchResult(
                id=row.id,
                question=row.question,
                answer=row.answer,
                citation_ids=list(row.citation_ids),
                similarity=score,
                citation_details=citation_details,
            )
            for (row, score), citation_details in zip(candidates, details)
        ]
        log_search_metrics(limit, [r.similarity for r in results], len(results))
        return results

    async def search_text(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[SimilaritySearchResult]:
        """Embed `query` and search. Any failure degrades to no results."""
        if self._embedder is None:
            logger.warning("search_text_without_embedder")
            return []
        try:
            embedding = await self._embedder.embed(query)
        except EmbeddingUnavailable as e:
            logger.warning("search_embedding_unavailable", error=str(e))
            return []
        try:
            return await self.search(embedding, limit)
        except Exception:
            logger.exception("search_failed", query_len=len(query), limit=limit)
            return []

    async def _catch_up(self) -> None:
        """Rebuild the index when other writers (backfill, another process) added rows."""
        if await self._questions.count_questions() == self._index.synced_rows:
            return
        await self._index.catch_up(self._questions)

    async def _citation_details(self, citation_ids: list[str]) -> list[CitationDetail]:
        if not citation_ids:
            return []
        citations = await self._citations.get_citations(citation_ids)
        return [
            CitationDetail(
                permalink=c.permalink,
                content=c.content or MISSING_CONTENT,
                timestamp=c.timestamp or "",
                username=c.username or UNKNOWN_USER,
            )
            for c in citations
        ]
