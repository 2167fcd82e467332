"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class ChatMessage:
    user: str | None
    text: str
    ts: str | None = None  # Slack message timestamp, e.g. "1719238400.253229"

    @property
    def sent_at(self) -> datetime | None:
        if not self.ts:
            return None
        seconds = self.ts.split(".")[0]
        if not seconds.isdigit():
            return None
        return datetime.fromtimestamp(int(seconds), tz=timezone.utc)


@dataclass
class QuestionAnswerPair:
    question: str
    answer: str
    citations: list[int]  # 1-based indexes into the source thread


@dataclass
class Citation:
    id: str
    permalink: str
    content: str
    timestamp: str
    username: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class CitationDetail:
    permalink: str
    content: str
    timestamp: str
    username: str


@dataclass
class StoredQuestion:
    id: str
    question: str
    answer: str
    citation_ids: list[str]
    embedding: list[float]  # embedding of `question`, never of `answer`
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class SimilaritySearchResult:
    id: str
    question: str
    answer: str
    citation_ids: list[str]
    similarity: float
    citation_details: list[CitationDetail] = field(default_factory=list)

    def to_context(self) -> dict:
        """Shape handed back to the model as search context."""
        return {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
            "citationIds": self.citation_ids,
            "similarity": round(self.similarity, 4),
            "citationDetails": [
                {
                    "permalink": c.permalink,
                    "content": c.content,
                    "timestamp": c.timestamp,
                    "username": c.username,
                }
                for c in self.citation_details
            ],
        }


@dataclass
class AnswerResult:
    answer: str
    has_answer: bool
    sources: list[str] | None = None


@dataclass
class IngestReport:
    pairs_found: int = 0
    questions_stored: int = 0
    citations_stored: int = 0
    pairs_skipped: int = 0
    question_ids: list[str] = field(default_factory=list)
