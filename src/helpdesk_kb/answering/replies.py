"""Closed tagged variant of everything the model can say in one turn."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

MalformedProblem = Literal["invalid_json", "wrong_shape", "bad_tool_call", "untagged"]


@dataclass(frozen=True)
class Answer:
    content: str
    sources: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class NoAnswer:
    reason: str = ""


@dataclass(frozen=True)
class NotQuestion:
    pass


@dataclass(frozen=True)
class SearchRequest:
    query: str | None = None
    limit: int | None = None
    call_id: str | None = None  # set when the request arrived as a tool call


@dataclass(frozen=True)
class Malformed:
    problem: MalformedProblem
    detail: str = ""


ModelReply = Union[Answer, NoAnswer, NotQuestion, SearchRequest, Malformed]
