"""Tests for the answer loop: the pure transitions and the async driver."""

from __future__ import annotations

import json

from conftest import FakeChatModel

from helpdesk_kb.answering.engine import AnswerEngine
from helpdesk_kb.answering.replies import Answer, Malformed, NoAnswer, NotQuestion, SearchRequest
from helpdesk_kb.answering.reply_codecs import JsonReplyCodec, ToolReplyCodec
from helpdesk_kb.answering.state_machine import (
    Finish,
    RunSearch,
    initial_state,
    normalize_limit,
    resume_after_search,
    step,
)
from helpdesk_kb.config.constants import (
    EXHAUSTED_MESSAGE,
    MODEL_UNAVAILABLE_MESSAGE,
    NO_RESULTS_MESSAGE,
    NOT_A_QUESTION_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
)
from helpdesk_kb.exceptions import ModelUnavailable
from helpdesk_kb.generation.messages import ModelMessage, ToolCall
from helpdesk_kb.models.domain import SimilaritySearchResult


class FakeSearcher:
    def __init__(self, results: list[SimilaritySearchResult] | None = None) -> None:
        self._results = results or []
        self.calls: list[tuple[str, int]] = []

    async def search_text(self, query: str, limit: int) -> list[SimilaritySearchResult]:
        self.calls.append((query, limit))
        return list(self._results)


class ExplodingSearcher:
    async def search_text(self, query: str, limit: int) -> list[SimilaritySearchResult]:
        raise RuntimeError("boom")


def _json(payload: dict) -> ModelMessage:
    return ModelMessage(content=json.dumps(payload))


def _hit() -> SimilaritySearchResult:
    return SimilaritySearchResult(
        id="q1",
        question="How do I reset my password?",
        answer="Settings > Security.",
        citation_ids=["c1"],
        similarity=0.92,
    )


# --- Pure transitions ---


def test_normalize_limit():
    assert normalize_limit(None) == 3
    assert normalize_limit(0) == 3
    assert normalize_limit(-2) == 3
    assert normalize_limit(True) == 3
    assert normalize_limit(7) == 7


def test_initial_state_has_system_and_question():
    state = initial_state("Why is CI red?", JsonReplyCodec())
    assert state.attempt == 0
    assert state.messages[0]["role"] == "system"
    assert state.messages[1] == {"role": "user", "content": "Why is CI red?"}


def test_step_terminal_replies_finish_without_advancing():
    codec = JsonReplyCodec()
    state = initial_state("q?", codec)
    message = ModelMessage(content="{}")

    _, effect = step(state, message, NotQuestion(), codec)
    assert effect.result.answer == NOT_A_QUESTION_MESSAGE
    assert effect.result.has_answer is False

    _, effect = step(state, message, NoAnswer("Nothing on file"), codec)
    assert effect.result.answer == "I don't know\n\nNothing on file"
    assert effect.result.has_answer is False

    new_state, effect = step(state, message, Answer("Do X.", ["https://x/1"]), codec)
    assert new_state.attempt == 0
    assert effect.result.has_answer is True
    assert effect.result.sources == ["https://x/1"]


def test_step_search_defaults_query_and_limit():
    codec = JsonReplyCodec()
    state = initial_state("How do I reset 2FA?", codec)
    _, effect = step(state, ModelMessage(content="{}"), SearchRequest(query="  "), codec)
    assert isinstance(effect, RunSearch)
    assert effect.query == "How do I reset 2FA?"
    assert effect.limit == 3


def test_step_malformed_advances_with_correction():
    codec = JsonReplyCodec()
    state = initial_state("q?", codec)
    new_state, effect = step(state, ModelMessage(content="nope"), Malformed("invalid_json"), codec)
    assert effect is None
    assert new_state.attempt == 1
    assert len(new_state.messages) == len(state.messages) + 2


def test_resume_with_no_results_finishes():
    codec = JsonReplyCodec()
    state = initial_state("q?", codec)
    search = RunSearch(SearchRequest(), "q?", 3)
    _, effect = resume_after_search(state, ModelMessage(content="{}"), search, [], codec)
    assert isinstance(effect, Finish)
    assert effect.result.answer == NO_RESULTS_MESSAGE


# --- Driver ---


async def test_direct_answer_uses_one_call():
    llm = FakeChatModel([_json({"type": "answer", "content": "Use the VPN.", "sources": []})])
    engine = AnswerEngine(llm, FakeSearcher(), JsonReplyCodec())
    result = await engine.answer_question("How do I reach staging?")
    assert result.has_answer is True
    assert result.answer == "Use the VPN."
    assert llm.call_count == 1


async def test_malformed_replies_exhaust_after_three_calls():
    llm = FakeChatModel([ModelMessage(content="not json")] * 5)
    engine = AnswerEngine(llm, FakeSearcher(), JsonReplyCodec())
    result = await engine.answer_question("How do I reach staging?")
    assert result.has_answer is False
    assert result.answer == EXHAUSTED_MESSAGE
    assert llm.call_count == 3


async def test_correction_is_sent_after_malformed_reply():
    llm = FakeChatModel(
        [
            ModelMessage(content="not json"),
            _json({"type": "answer", "content": "Fixed.", "sources": []}),
        ]
    )
    engine = AnswerEngine(llm, FakeSearcher(), JsonReplyCodec())
    result = await engine.answer_question("q?")
    assert result.answer == "Fixed."
    second_request = llm.calls[1]["messages"]
    assert second_request[-1]["content"] == "You didn't respond with valid JSON. Please try again."


async def test_not_question():
    llm = FakeChatModel([_json({"type": "not_question"})])
    engine = AnswerEngine(llm, FakeSearcher(), JsonReplyCodec())
    result = await engine.answer_question("thanks all!")
    assert result.has_answer is False
    assert result.answer == NOT_A_QUESTION_MESSAGE


async def test_search_then_answer():
    searcher = FakeSearcher([_hit()])
    llm = FakeChatModel(
        [
            _json({"type": "search_similar_questions", "query": "reset password"}),
            _json({"type": "answer", "content": "Settings > Security.", "sources": ["https://x/1"]}),
        ]
    )
    engine = AnswerEngine(llm, searcher, JsonReplyCodec())
    result = await engine.answer_question("How do I reset my password?")
    assert result.has_answer is True
    assert result.sources == ["https://x/1"]
    assert searcher.calls == [("reset password", 3)]
    assert llm.call_count == 2
    fed_back = json.loads(llm.calls[1]["messages"][-1]["content"])
    assert fed_back["results"][0]["question"] == "How do I reset my password?"


async def test_empty_search_results_finish_without_another_call():
    llm = FakeChatModel([_json({"type": "search_similar_questions"})])
    searcher = FakeSearcher([])
    engine = AnswerEngine(llm, searcher, JsonReplyCodec())
    result = await engine.answer_question("Where is the wiki?")
    assert result.has_answer is False
    assert result.answer == NO_RESULTS_MESSAGE
    assert searcher.calls == [("Where is the wiki?", 3)]
    assert llm.call_count == 1


async def test_search_counts_against_attempt_budget():
    llm = FakeChatModel([_json({"type": "search_similar_questions"})] * 5)
    engine = AnswerEngine(llm, FakeSearcher([_hit()]), JsonReplyCodec())
    result = await engine.answer_question("q?")
    assert result.answer == EXHAUSTED_MESSAGE
    assert llm.call_count == 3


async def test_model_unavailable_returns_apology():
    llm = FakeChatModel([ModelUnavailable("503")])
    engine = AnswerEngine(llm, FakeSearcher(), JsonReplyCodec())
    result = await engine.answer_question("q?")
    assert result.has_answer is False
    assert result.answer == MODEL_UNAVAILABLE_MESSAGE


async def test_empty_model_body_returns_apology():
    llm = FakeChatModel([ModelMessage(content="   ")])
    engine = AnswerEngine(llm, FakeSearcher(), JsonReplyCodec())
    result = await engine.answer_question("q?")
    assert result.answer == MODEL_UNAVAILABLE_MESSAGE
    assert llm.call_count == 1


async def test_unexpected_error_never_raises():
    llm = FakeChatModel([_json({"type": "search_similar_questions"})])
    engine = AnswerEngine(llm, ExplodingSearcher(), JsonReplyCodec())
    result = await engine.answer_question("q?")
    assert result.has_answer is False
    assert result.answer == UNEXPECTED_ERROR_MESSAGE


async def test_tool_style_search_then_answer():
    searcher = FakeSearcher([_hit()])
    llm = FakeChatModel(
        [
            ModelMessage(
                tool_calls=(ToolCall("call_9", "search_similar_questions", '{"limit": 5}'),)
            ),
            ModelMessage(content="<answer>Settings > Security.</answer><sources>https://x/1</sources>"),
        ]
    )
    engine = AnswerEngine(llm, searcher, ToolReplyCodec())
    result = await engine.answer_question("How do I reset my password?")
    assert result.has_answer is True
    assert result.sources == ["https://x/1"]
    assert searcher.calls == [("How do I reset my password?", 5)]
    assert llm.calls[0]["tools"] is not None
    tool_message = llm.calls[1]["messages"][-1]
    assert tool_message["role"] == "tool"
    assert tool_message["tool_call_id"] == "call_9"
