"""Tests for the JSON and tool-calling reply codecs."""

from __future__ import annotations

import json

from helpdesk_kb.answering.replies import Answer, Malformed, NoAnswer, NotQuestion, SearchRequest
from helpdesk_kb.answering.reply_codecs import (
    JsonReplyCodec,
    ToolReplyCodec,
    create_codec,
    split_sources,
)
from helpdesk_kb.generation.messages import ModelMessage, ToolCall
from helpdesk_kb.generation.prompt_templates import (
    INVALID_JSON_CORRECTION,
    TOOLS_FORMAT_CORRECTION,
    WRONG_SHAPE_CORRECTION,
)
from helpdesk_kb.models.domain import SimilaritySearchResult


def _json(payload: dict) -> ModelMessage:
    return ModelMessage(content=json.dumps(payload))


def _result() -> SimilaritySearchResult:
    return SimilaritySearchResult(
        id="q1",
        question="How do I reset my password?",
        answer="Settings > Security.",
        citation_ids=["c1"],
        similarity=0.91,
    )


# --- JSON style ---


def test_json_parses_answer():
    codec = JsonReplyCodec()
    reply = codec.parse(_json({"type": "answer", "content": "Use SSO.", "sources": ["https://x/1"]}))
    assert reply == Answer(content="Use SSO.", sources=["https://x/1"])


def test_json_answer_without_sources():
    reply = JsonReplyCodec().parse(_json({"type": "answer", "content": "Use SSO."}))
    assert reply == Answer(content="Use SSO.", sources=[])


def test_json_parses_no_answer_and_not_question():
    codec = JsonReplyCodec()
    assert codec.parse(_json({"type": "no_answer", "reason": "Not covered"})) == NoAnswer("Not covered")
    assert codec.parse(_json({"type": "not_question"})) == NotQuestion()


def test_json_parses_search_request():
    reply = JsonReplyCodec().parse(
        _json({"type": "search_similar_questions", "query": "vpn", "limit": 5})
    )
    assert reply == SearchRequest(query="vpn", limit=5)


def test_json_invalid_json_is_malformed():
    reply = JsonReplyCodec().parse(ModelMessage(content="I think the answer is..."))
    assert isinstance(reply, Malformed)
    assert reply.problem == "invalid_json"


def test_json_unknown_type_is_wrong_shape():
    reply = JsonReplyCodec().parse(_json({"type": "shrug"}))
    assert isinstance(reply, Malformed)
    assert reply.problem == "wrong_shape"


def test_json_correction_text_depends_on_problem():
    codec = JsonReplyCodec()
    message = ModelMessage(content="oops")
    invalid = codec.correction_messages(message, Malformed("invalid_json"))
    wrong = codec.correction_messages(message, Malformed("wrong_shape"))
    assert invalid[0] == {"role": "assistant", "content": "oops"}
    assert invalid[1] == {"role": "user", "content": INVALID_JSON_CORRECTION}
    assert wrong[1] == {"role": "user", "content": WRONG_SHAPE_CORRECTION}


def test_json_search_messages_feed_results_as_user_turn():
    codec = JsonReplyCodec()
    message = _json({"type": "search_similar_questions"})
    messages = codec.search_messages(message, SearchRequest(), [_result()])
    assert messages[0]["role"] == "assistant"
    assert messages[1]["role"] == "user"
    payload = json.loads(messages[1]["content"])
    assert payload["results"][0]["id"] == "q1"
    assert payload["results"][0]["citationIds"] == ["c1"]


def test_json_request_options():
    assert JsonReplyCodec().request_options() == {"response_format": {"type": "json_object"}}


# --- Tool-calling style ---


def test_tools_parses_search_tool_call():
    message = ModelMessage(
        tool_calls=(ToolCall("call_1", "search_similar_questions", '{"query": "vpn", "limit": 2}'),)
    )
    reply = ToolReplyCodec().parse(message)
    assert reply == SearchRequest(query="vpn", limit=2, call_id="call_1")


def test_tools_unknown_tool_is_malformed():
    message = ModelMessage(tool_calls=(ToolCall("call_1", "delete_everything", "{}"),))
    reply = ToolReplyCodec().parse(message)
    assert isinstance(reply, Malformed)
    assert reply.problem == "bad_tool_call"


def test_tools_bad_arguments_are_malformed():
    message = ModelMessage(tool_calls=(ToolCall("call_1", "search_similar_questions", "not json"),))
    reply = ToolReplyCodec().parse(message)
    assert isinstance(reply, Malformed)
    assert reply.problem == "bad_tool_call"


def test_tools_parses_tagged_answer_with_sources():
    text = (
        "<answer>Restart the VPN client.</answer>\n"
        "<sources>https://x/1, https://x/2</sources>"
    )
    reply = ToolReplyCodec().parse(ModelMessage(content=text))
    assert reply == Answer(content="Restart the VPN client.", sources=["https://x/1", "https://x/2"])


def test_tools_parses_no_answer_and_not_question():
    codec = ToolReplyCodec()
    assert codec.parse(ModelMessage(content="<no-answer>Nothing similar</no-answer>")) == NoAnswer(
        "Nothing similar"
    )
    assert codec.parse(ModelMessage(content="<not-question/>")) == NotQuestion()


def test_tools_untagged_text_is_malformed():
    reply = ToolReplyCodec().parse(ModelMessage(content="Just restart it."))
    assert isinstance(reply, Malformed)
    assert reply.problem == "untagged"


def test_tools_search_messages_answer_only_the_handled_call():
    message = ModelMessage(
        tool_calls=(
            ToolCall("call_1", "search_similar_questions", "{}"),
            ToolCall("call_2", "search_similar_questions", "{}"),
        )
    )
    request = SearchRequest(call_id="call_1")
    messages = ToolReplyCodec().search_messages(message, request, [_result()])
    assert [c["id"] for c in messages[0]["tool_calls"]] == ["call_1"]
    assert messages[1]["role"] == "tool"
    assert messages[1]["tool_call_id"] == "call_1"


def test_tools_correction_message():
    messages = ToolReplyCodec().correction_messages(
        ModelMessage(content="hi"), Malformed("untagged")
    )
    assert messages[-1] == {"role": "user", "content": TOOLS_FORMAT_CORRECTION}


def test_split_sources():
    assert split_sources("a, b\nc,, ") == ["a", "b", "c"]
    assert split_sources("") == []


def test_create_codec():
    assert isinstance(create_codec("tools"), ToolReplyCodec)
    assert isinstance(create_codec("json"), JsonReplyCodec)
