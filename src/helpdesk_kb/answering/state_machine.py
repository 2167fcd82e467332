"""Pure state transitions of the answer loop.

Nothing here performs I/O. The driver in `engine.py` calls the model, feeds
the parsed reply to `step`, executes any `RunSearch` effect and hands the
results to `resume_after_search`, until a `Finish` effect appears or the
attempt budget is spent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from helpdesk_kb.answering.replies import (
    Answer,
    Malformed,
    ModelReply,
    NoAnswer,
    NotQuestion,
    SearchRequest,
)
from helpdesk_kb.answering.reply_codecs import ReplyCodec
from helpdesk_kb.config.constants import (
    DEFAULT_SEARCH_LIMIT,
    EXHAUSTED_MESSAGE,
    MODEL_UNAVAILABLE_MESSAGE,
    NO_ANSWER_PREFIX,
    NO_RESULTS_MESSAGE,
    NOT_A_QUESTION_MESSAGE,
)
from helpdesk_kb.generation.messages import ModelMessage
from helpdesk_kb.models.domain import AnswerResult, SimilaritySearchResult


@dataclass(frozen=True)
class AnswerState:
    question: str
    attempt: int
    messages: tuple[dict, ...]


@dataclass(frozen=True)
class Finish:
    result: AnswerResult
    outcome: str


@dataclass(frozen=True)
class RunSearch:
    request: SearchRequest
    query: str
    limit: int


Effect = Union[Finish, RunSearch]


def initial_state(question: str, codec: ReplyCodec) -> AnswerState:
    return AnswerState(
        question=question,
        attempt=0,
        messages=(
            {"role": "system", "content": codec.system_prompt},
            {"role": "user", "content": question},
        ),
    )


def normalize_limit(limit: int | None) -> int:
    if isinstance(limit, int) and not isinstance(limit, bool) and limit > 0:
        return limit
    return DEFAULT_SEARCH_LIMIT


def _advance(state: AnswerState, new_messages: list[dict]) -> AnswerState:
    return AnswerState(
        question=state.question,
        attempt=state.attempt + 1,
        messages=state.messages + tuple(new_messages),
    )


def step(
    state: AnswerState,
    message: ModelMessage,
    reply: ModelReply,
    codec: ReplyCodec,
) -> tuple[AnswerState, Effect | None]:
    if isinstance(reply, NotQuestion):
        return state, Finish(AnswerResult(NOT_A_QUESTION_MESSAGE, has_answer=False), "not_question")

    if isinstance(reply, NoAnswer):
        text = f"{NO_ANSWER_PREFIX}\n\n{reply.reason}"
        return state, Finish(AnswerResult(text, has_answer=False), "no_answer")

    if isinstance(reply, Answer):
        result = AnswerResult(reply.content, has_answer=True, sources=list(reply.sources))
        return state, Finish(result, "answer")

    if isinstance(reply, SearchRequest):
        query = (reply.query or "").strip() or state.question
        return state, RunSearch(request=reply, query=query, limit=normalize_limit(reply.limit))

    if isinstance(reply, Malformed):
        return _advance(state, codec.correction_messages(message, reply)), None

    raise TypeError(f"Unhandled reply variant: {reply!r}")


def resume_after_search(
    state: AnswerState,
    message: ModelMessage,
    search: RunSearch,
    results: list[SimilaritySearchResult],
    codec: ReplyCodec,
) -> tuple[AnswerState, Effect | None]:
    if not results:
        return state, Finish(AnswerResult(NO_RESULTS_MESSAGE, has_answer=False), "no_results")
    return _advance(state, codec.search_messages(message, search.request, results)), None


def exhausted() -> Finish:
    return Finish(AnswerResult(EXHAUSTED_MESSAGE, has_answer=False), "exhausted")


def model_unavailable() -> Finish:
    return Finish(AnswerResult(MODEL_UNAVAILABLE_MESSAGE, has_answer=False), "model_unavailable")
