"""Protocols for the citation and question stores."""

from __future__ import annotations

from typing import Protocol

from helpdesk_kb.models.domain import Citation, StoredQuestion


class CitationStore(Protocol):
    async def create_citation(
        self, permalink: str, content: str, timestamp: str, username: str
    ) -> Citation: ...

    async def get_citations(self, citation_ids: list[str]) -> list[Citation]:
        """Returns citations in the order of `citation_ids`, omitting unknown ids."""
        ...


class QuestionStore(Protocol):
    async def create_question(
        self,
        question: str,
        answer: str,
        citation_ids: list[str],
        embedding: list[float],
    ) -> StoredQuestion: ...

    async def get_questions_by_ids(self, question_ids: list[str]) -> dict[str, StoredQuestion]: ...

    async def get_all_questions(self) -> list[StoredQuestion]: ...

    async def count_questions(self) -> int: ...
