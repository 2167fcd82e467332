"""Extract question/answer pairs from a resolved help-desk thread with one LLM call."""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Annotated

from pydantic import BaseModel, Field, ValidationError

from helpdesk_kb.exceptions import ModelUnavailable, ParseThreadFailed
from helpdesk_kb.generation.prompt_templates import (
    QA_PAIRS_RESPONSE_FORMAT,
    THREAD_PARSER_SYSTEM,
    format_thread,
)
from helpdesk_kb.models.domain import ChatMessage, QuestionAnswerPair
from helpdesk_kb.observability.logger import get_logger
from helpdesk_kb.protocols.llm import ChatModel

logger = get_logger("thread_parser")

_CITATION_MARKER_RE = re.compile(r"\[#\d+\]")


class _ExtractedPair(BaseModel):
    question: str
    answer: str
    citations: list[Annotated[int, Field(ge=1)]]


class _ExtractionResponse(BaseModel):
    qa_pairs: list[_ExtractedPair]


def strip_id(text: str) -> str:
    """Remove residual `[#N]` citation markers the model echoed into the text."""
    return _CITATION_MARKER_RE.sub("", text).strip()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ThreadParser:
    def __init__(self, llm: ChatModel, clock: Callable[[], datetime] = _utc_now) -> None:
        self._llm = llm
        self._clock = clock

    async def parse_thread(self, messages: list[ChatMessage]) -> list[QuestionAnswerPair]:
        """Never raises: a failed extraction yields no pairs."""
        if not messages:
            return []
        try:
            extracted = await self._extract(messages)
        except ParseThreadFailed as e:
            logger.warning("parse_thread_failed", messages=len(messages), error=str(e))
            return []

        pairs = []
        for item in extracted.qa_pairs:
            question = strip_id(item.question)
            answer = strip_id(item.answer)
            if not question or not answer:
                logger.debug("dropped_empty_pair", citations=item.citations)
                continue
            pairs.append(
                QuestionAnswerPair(question=question, answer=answer, citations=list(item.citations))
            )

        logger.info("parsed_thread", messages=len(messages), pairs=len(pairs))
        return pairs

    async def _extract(self, messages: list[ChatMessage]) -> _ExtractionResponse:
        system = THREAD_PARSER_SYSTEM.format(now=self._clock().isoformat())
        try:
            reply = await self._llm.complete(
                [
                    {"role": "system", "content": system},
                    {"role": "user", "content": format_thread(messages)},
                ],
                response_format=QA_PAIRS_RESPONSE_FORMAT,
            )
        except ModelUnavailable as e:
            raise ParseThreadFailed(f"Model unavailable: {e}") from e

        if not reply.text:
            raise ParseThreadFailed("Model returned an empty response")
        try:
            return _ExtractionResponse.model_validate_json(reply.text)
        except ValidationError as e:
            raise ParseThreadFailed(f"Response does not match schema: {e.error_count()} errors") from e
