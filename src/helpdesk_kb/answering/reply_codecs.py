"""Serializations of the model reply variant.

Each codec owns one wire format: the system prompt that teaches it, the
request options that constrain it, a strict parser into `ModelReply`, and
the messages that feed search results or corrections back to the model.
"""

from __future__ import annotations

import json
import re
from typing import Annotated, Literal, Protocol, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from helpdesk_kb.answering.replies import (
    Answer,
    Malformed,
    ModelReply,
    NoAnswer,
    NotQuestion,
    SearchRequest,
)
from helpdesk_kb.config.constants import SEARCH_TOOL_NAME
from helpdesk_kb.generation.messages import ModelMessage
from helpdesk_kb.generation.prompt_templates import (
    ANSWER_JSON_SYSTEM,
    ANSWER_TOOLS_SYSTEM,
    INVALID_JSON_CORRECTION,
    SEARCH_TOOL,
    TOOLS_FORMAT_CORRECTION,
    WRONG_SHAPE_CORRECTION,
)
from helpdesk_kb.models.domain import SimilaritySearchResult


class ReplyCodec(Protocol):
    name: str
    system_prompt: str

    def request_options(self) -> dict: ...

    def parse(self, message: ModelMessage) -> ModelReply: ...

    def search_messages(
        self,
        message: ModelMessage,
        request: SearchRequest,
        results: list[SimilaritySearchResult],
    ) -> list[dict]: ...

    def correction_messages(self, message: ModelMessage, reply: Malformed) -> list[dict]: ...


def _results_payload(results: list[SimilaritySearchResult]) -> str:
    return json.dumps({"results": [r.to_context() for r in results]})


# --- Structured-JSON style -------------------------------------------------


class _AnswerPayload(BaseModel):
    type: Literal["answer"]
    content: str | None = None
    sources: list[str] | None = None


class _NoAnswerPayload(BaseModel):
    type: Literal["no_answer"]
    reason: str | None = None


class _NotQuestionPayload(BaseModel):
    type: Literal["not_question"]


class _SearchPayload(BaseModel):
    type: Literal["search_similar_questions"]
    query: str | None = None
    limit: int | None = None


_ReplyPayload = TypeAdapter(
    Annotated[
        Union[_AnswerPayload, _NoAnswerPayload, _NotQuestionPayload, _SearchPayload],
        Field(discriminator="type"),
    ]
)


class JsonReplyCodec:
    name = "json"
    system_prompt = ANSWER_JSON_SYSTEM

    def request_options(self) -> dict:
        return {"response_format": {"type": "json_object"}}

    def parse(self, message: ModelMessage) -> ModelReply:
        try:
            data = json.loads(message.text)
        except json.JSONDecodeError as e:
            return Malformed("invalid_json", str(e))

        try:
            payload = _ReplyPayload.validate_python(data)
        except ValidationError as e:
            return Malformed("wrong_shape", f"{e.error_count()} validation errors")

        if isinstance(payload, _AnswerPayload):
            return Answer(content=payload.content or "", sources=list(payload.sources or []))
        if isinstance(payload, _NoAnswerPayload):
            return NoAnswer(reason=payload.reason or "")
        if isinstance(payload, _NotQuestionPayload):
            return NotQuestion()
        return SearchRequest(query=payload.query, limit=payload.limit)

    def search_messages(
        self,
        message: ModelMessage,
        request: SearchRequest,
        results: list[SimilaritySearchResult],
    ) -> list[dict]:
        return [
            message.to_dict(tool_calls=()),
            {"role": "user", "content": _results_payload(results)},
        ]

    def correction_messages(self, message: ModelMessage, reply: Malformed) -> list[dict]:
        correction = (
            INVALID_JSON_CORRECTION if reply.problem == "invalid_json" else WRONG_SHAPE_CORRECTION
        )
        return [message.to_dict(tool_calls=()), {"role": "user", "content": correction}]


# --- Tool-calling style ----------------------------------------------------

_NOT_QUESTION_RE = re.compile(r"<not-question\s*/?>", re.IGNORECASE)
_NO_ANSWER_RE = re.compile(r"<no-answer>(.*?)</no-answer>", re.DOTALL | re.IGNORECASE)
_ANSWER_RE = re.compile(r"<answer>(.*?)</answer>", re.DOTALL | re.IGNORECASE)
_SOURCES_RE = re.compile(r"<sources>(.*?)</sources>", re.DOTALL | re.IGNORECASE)


class _SearchArguments(BaseModel):
    query: str | None = None
    limit: int | None = None


def split_sources(raw: str) -> list[str]:
    return [s.strip() for s in re.split(r"[,\n]", raw) if s.strip()]


class ToolReplyCodec:
    name = "tools"
    system_prompt = ANSWER_TOOLS_SYSTEM

    def request_options(self) -> dict:
        return {"tools": [SEARCH_TOOL]}

    def parse(self, message: ModelMessage) -> ModelReply:
        if message.tool_calls:
            call = message.tool_calls[0]
            if call.name != SEARCH_TOOL_NAME:
                return Malformed("bad_tool_call", f"unknown tool {call.name!r}")
            try:
                args = _SearchArguments.model_validate_json(call.arguments or "{}")
            except ValidationError as e:
                return Malformed("bad_tool_call", f"{e.error_count()} argument errors")
            return SearchRequest(query=args.query, limit=args.limit, call_id=call.id)

        text = message.text
        if _NOT_QUESTION_RE.search(text):
            return NotQuestion()

        match = _NO_ANSWER_RE.search(text)
        if match:
            return NoAnswer(reason=match.group(1).strip())

        match = _ANSWER_RE.search(text)
        if match:
            sources_match = _SOURCES_RE.search(text)
            sources = split_sources(sources_match.group(1)) if sources_match else []
            return Answer(content=match.group(1).strip(), sources=sources)

        return Malformed("untagged", text[:80])

    def search_messages(
        self,
        message: ModelMessage,
        request: SearchRequest,
        results: list[SimilaritySearchResult],
    ) -> list[dict]:
        handled = tuple(c for c in message.tool_calls if c.id == request.call_id)
        if not handled:
            return [
                message.to_dict(tool_calls=()),
                {"role": "user", "content": _results_payload(results)},
            ]
        return [
            message.to_dict(tool_calls=handled),
            {
                "role": "tool",
                "tool_call_id": request.call_id,
                "content": _results_payload(results),
            },
        ]

    def correction_messages(self, message: ModelMessage, reply: Malformed) -> list[dict]:
        return [message.to_dict(tool_calls=()), {"role": "user", "content": TOOLS_FORMAT_CORRECTION}]


def create_codec(style: str) -> ReplyCodec:
    if style == "tools":
        return ToolReplyCodec()
    return JsonReplyCodec()
