"""Answer engine: drives the bounded model/search loop to an AnswerResult."""

from __future__ import annotations

import time
from typing import Protocol

from helpdesk_kb.answering.reply_codecs import ReplyCodec
from helpdesk_kb.answering.state_machine import (
    Finish,
    RunSearch,
    exhausted,
    initial_state,
    model_unavailable,
    resume_after_search,
    step,
)
from helpdesk_kb.config.constants import MAX_ANSWER_ATTEMPTS, UNEXPECTED_ERROR_MESSAGE
from helpdesk_kb.exceptions import ModelUnavailable
from helpdesk_kb.models.domain import AnswerResult, SimilaritySearchResult
from helpdesk_kb.observability.logger import get_logger
from helpdesk_kb.observability.metrics import log_answer_metrics
from helpdesk_kb.protocols.llm import ChatModel

logger = get_logger("answer_engine")


class TextSearcher(Protocol):
    async def search_text(self, query: str, limit: int) -> list[SimilaritySearchResult]: ...


class AnswerEngine:
    def __init__(
        self,
        llm: ChatModel,
        searcher: TextSearcher,
        codec: ReplyCodec,
        max_attempts: int = MAX_ANSWER_ATTEMPTS,
    ) -> None:
        self._llm = llm
        self._searcher = searcher
        self._codec = codec
        self._max_attempts = max_attempts

    async def answer_question(self, question: str) -> AnswerResult:
        """Never raises: every failure resolves to `has_answer=False`."""
        start = time.monotonic()
        stats = {"attempts": 0, "model_calls": 0, "searches": 0}
        try:
            finish = await self._run(question, stats)
        except Exception:
            logger.exception("answer_failed", question_len=len(question))
            finish = Finish(AnswerResult(UNEXPECTED_ERROR_MESSAGE, has_answer=False), "error")

        log_answer_metrics(
            outcome=finish.outcome,
            attempts=stats["attempts"],
            model_calls=stats["model_calls"],
            searches=stats["searches"],
            duration_ms=(time.monotonic() - start) * 1000,
        )
        return finish.result

    async def _run(self, question: str, stats: dict) -> Finish:
        state = initial_state(question, self._codec)
        options = self._codec.request_options()

        while state.attempt < self._max_attempts:
            try:
                message = await self._llm.complete(list(state.messages), **options)
            except ModelUnavailable as e:
                logger.warning("model_unavailable", attempt=state.attempt, error=str(e))
                return model_unavailable()
            stats["model_calls"] += 1

            if message.is_empty:
                logger.warning("model_empty_response", attempt=state.attempt)
                return model_unavailable()

            reply = self._codec.parse(message)
            logger.info(
                "model_reply",
                attempt=state.attempt,
                style=self._codec.name,
                reply=type(reply).__name__,
            )

            state, effect = step(state, message, reply, self._codec)
            if isinstance(effect, RunSearch):
                results = await self._searcher.search_text(effect.query, effect.limit)
                stats["searches"] += 1
                logger.info(
                    "search_completed",
                    attempt=state.attempt,
                    limit=effect.limit,
                    results=len(results),
                )
                state, effect = resume_after_search(state, message, effect, results, self._codec)

            stats["attempts"] = state.attempt
            if isinstance(effect, Finish):
                return effect

        return exhausted()
