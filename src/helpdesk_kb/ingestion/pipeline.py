"""Ingestion pipeline: parse thread -> embed question -> store citations -> store question -> index."""

from __future__ import annotations

import numpy as np

from helpdesk_kb.config.constants import MISSING_CONTENT, UNKNOWN_USER
from helpdesk_kb.exceptions import CitationResolutionFailed, EmbeddingUnavailable
from helpdesk_kb.models.domain import ChatMessage, IngestReport, QuestionAnswerPair
from helpdesk_kb.observability.logger import get_logger
from helpdesk_kb.observability.metrics import log_ingestion_metrics
from helpdesk_kb.parsing.thread_parser import ThreadParser
from helpdesk_kb.protocols.chat import ChatPlatform
from helpdesk_kb.protocols.embedder import Embedder
from helpdesk_kb.protocols.stores import CitationStore, QuestionStore
from helpdesk_kb.vectorstore.faiss_index import FAISSQuestionIndex

logger = get_logger("ingestion")


class IngestionPipeline:
    def __init__(
        self,
        thread_parser: ThreadParser,
        embedder: Embedder,
        citation_store: CitationStore,
        question_store: QuestionStore,
        question_index: FAISSQuestionIndex,
        chat: ChatPlatform,
    ) -> None:
        self._parser = thread_parser
        self._embedder = embedder
        self._citations = citation_store
        self._questions = question_store
        self._index = question_index
        self._chat = chat

    async def ingest_thread(self, channel_id: str, thread: list[ChatMessage]) -> IngestReport:
        report = IngestReport()

        # 1. Extract QA pairs (never raises; failure means no pairs)
        pairs = await self._parser.parse_thread(thread)
        report.pairs_found = len(pairs)

        # 2. Store each pair independently
        for pair in pairs:
            stored = await self._ingest_pair(channel_id, thread, pair, report)
            if not stored:
                report.pairs_skipped += 1

        log_ingestion_metrics(
            channel_id=channel_id,
            pairs_found=report.pairs_found,
            questions_stored=report.questions_stored,
            citations_stored=report.citations_stored,
            pairs_skipped=report.pairs_skipped,
        )
        return report

    async def _ingest_pair(
        self,
        channel_id: str,
        thread: list[ChatMessage],
        pair: QuestionAnswerPair,
        report: IngestReport,
    ) -> bool:
        try:
            embedding = await self._embedder.embed(pair.question)
        except EmbeddingUnavailable as e:
            logger.warning("pair_skipped_no_embedding", question=pair.question, error=str(e))
            return False

        citation_ids = []
        for index in pair.citations:
            citation_id = await self._store_citation(channel_id, thread, index)
            if citation_id is not None:
                citation_ids.append(citation_id)
        report.citations_stored += len(citation_ids)

        try:
            record = await self._questions.create_question(
                question=pair.question,
                answer=pair.answer,
                citation_ids=citation_ids,
                embedding=embedding,
            )
        except Exception:
            logger.exception("pair_skipped_store_failed", question=pair.question)
            return False

        try:
            await self._index.add_safe([record.id], np.array([embedding], dtype=np.float32))
        except ValueError as e:
            # Row is persisted; it will be indexed on the next rebuild if dimensions match
            logger.error("index_add_failed", question_id=record.id, error=str(e))

        report.questions_stored += 1
        report.question_ids.append(record.id)
        logger.info("ingested_pair", question_id=record.id, citations=len(citation_ids))
        return True

    async def _store_citation(
        self, channel_id: str, thread: list[ChatMessage], index: int
    ) -> str | None:
        position = index - 1
        if position < 0 or position >= len(thread):
            logger.warning("citation_out_of_range", index=index, thread_len=len(thread))
            return None
        message = thread[position]
        if not message.ts:
            logger.warning("citation_without_timestamp", index=index)
            return None

        try:
            permalink = await self._chat.resolve_permalink(channel_id, message.ts)
            username = await self._chat.lookup_user(message.user) if message.user else UNKNOWN_USER
        except CitationResolutionFailed as e:
            logger.warning("citation_skipped", index=index, ts=message.ts, error=str(e))
            return None
        except Exception:
            logger.exception("citation_resolution_error", index=index, ts=message.ts)
            return None

        try:
            citation = await self._citations.create_citation(
                permalink=permalink,
                content=message.text or MISSING_CONTENT,
                timestamp=message.ts,
                username=username or UNKNOWN_USER,
            )
        except Exception:
            logger.exception("citation_store_failed", index=index, ts=message.ts)
            return None
        return citation.id
