"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AnswerRequest(BaseModel):
    question: str


class AnswerResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answer: str
    has_answer: bool = Field(alias="hasAnswer")
    sources: list[str] | None = None


class ThreadMessage(BaseModel):
    user: str | None = None
    text: str = ""
    ts: str | None = None


class ParseThreadRequest(BaseModel):
    thread: list[ThreadMessage]


class QAPair(BaseModel):
    question: str
    answer: str
    citations: list[int] = Field(default_factory=list)


class ParseThreadResponse(BaseModel):
    qa_pairs: list[QAPair]


class EmbeddingRequest(BaseModel):
    text: str = Field(min_length=1)


class EmbeddingResponse(BaseModel):
    embedding: list[float]


class CitationCreate(BaseModel):
    permalink: str = Field(min_length=1)
    content: str = Field(min_length=1)
    timestamp: str = Field(min_length=1)
    username: str | None = None


class CitationOut(BaseModel):
    id: str
    permalink: str
    content: str
    timestamp: str
    username: str


class CitationDetailOut(BaseModel):
    permalink: str
    content: str
    timestamp: str
    username: str


class QuestionCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    citation_ids: list[str] = Field(default_factory=list, alias="citationIds")
    embedding: list[float] = Field(min_length=1)


class QuestionCreated(BaseModel):
    id: str


class SimilarQuestionsRequest(BaseModel):
    embedding: list[float] = Field(min_length=1)
    limit: int = Field(default=3, ge=1, le=50)


class SimilarQuestionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    question: str
    answer: str
    citation_ids: list[str] = Field(alias="citationIds")
    similarity: float
    citation_details: list[CitationDetailOut] = Field(alias="citationDetails")


class SimilarQuestionsResponse(BaseModel):
    results: list[SimilarQuestionOut]


class BrowseQuestionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    question: str
    answer: str
    citation_ids: list[str] = Field(alias="citationIds")
    citation_details: list[CitationDetailOut] = Field(alias="citationDetails")


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")


class BrowseResponse(BaseModel):
    questions: list[BrowseQuestionOut]
    pagination: Pagination


class IngestThreadRequest(BaseModel):
    channel_id: str
    thread: list[ThreadMessage]


class IngestThreadResponse(BaseModel):
    pairs_found: int
    questions_stored: int
    citations_stored: int
    pairs_skipped: int
    question_ids: list[str]


class HealthResponse(BaseModel):
    status: str
    question_count: int
    citation_count: int
    index_size: int
