"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from helpdesk_kb.api.dependencies import (
    get_citation_store,
    get_question_index,
    get_question_store,
)
from helpdesk_kb.models.schemas import HealthResponse
from helpdesk_kb.storage.sqlite_citation_store import SQLiteCitationStore
from helpdesk_kb.storage.sqlite_question_store import SQLiteQuestionStore
from helpdesk_kb.vectorstore.faiss_index import FAISSQuestionIndex

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    questions: SQLiteQuestionStore = Depends(get_question_store),
    citations: SQLiteCitationStore = Depends(get_citation_store),
    index: FAISSQuestionIndex = Depends(get_question_index),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        question_count=await questions.count_questions(),
        citation_count=await citations.count_citations(),
        index_size=index.size,
    )
