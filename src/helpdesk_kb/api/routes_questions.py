"""Question records: create, similarity search, browse; plus raw embeddings."""

from __future__ import annotations

import math

import numpy as np
from fastapi import APIRouter, Depends, HTTPException, Query

from helpdesk_kb.api.auth import require_client
from helpdesk_kb.api.dependencies import (
    get_citation_store,
    get_embedder,
    get_question_index,
    get_question_store,
    get_similarity_search,
)
from helpdesk_kb.exceptions import EmbeddingUnavailable
from helpdesk_kb.models.schemas import (
    BrowseQuestionOut,
    BrowseResponse,
    CitationDetailOut,
    EmbeddingRequest,
    EmbeddingResponse,
    Pagination,
    QuestionCreate,
    QuestionCreated,
    SimilarQuestionOut,
    SimilarQuestionsRequest,
    SimilarQuestionsResponse,
)
from helpdesk_kb.protocols.embedder import Embedder
from helpdesk_kb.retrieval.similarity_search import SimilaritySearch
from helpdesk_kb.storage.sqlite_citation_store import SQLiteCitationStore
from helpdesk_kb.storage.sqlite_question_store import SQLiteQuestionStore
from helpdesk_kb.vectorstore.faiss_index import FAISSQuestionIndex

router = APIRouter()


@router.post("/embeddings", response_model=EmbeddingResponse)
async def create_embedding(
    request: EmbeddingRequest,
    embedder: Embedder = Depends(get_embedder),
    _auth: dict = Depends(require_client),
) -> EmbeddingResponse:
    try:
        return EmbeddingResponse(embedding=await embedder.embed(request.text))
    except EmbeddingUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/questions", response_model=QuestionCreated)
async def create_question(
    request: QuestionCreate,
    store: SQLiteQuestionStore = Depends(get_question_store),
    index: FAISSQuestionIndex = Depends(get_question_index),
    _auth: dict = Depends(require_client),
) -> QuestionCreated:
    if len(request.embedding) != index.dimensions:
        raise HTTPException(
            status_code=400,
            detail=f"embedding must have {index.dimensions} dimensions",
        )
    record = await store.create_question(
        question=request.question,
        answer=request.answer,
        citation_ids=request.citation_ids,
        embedding=request.embedding,
    )
    await index.add_safe([record.id], np.array([record.embedding], dtype=np.float32))
    return QuestionCreated(id=record.id)


@router.post("/questions/search", response_model=SimilarQuestionsResponse)
async def search_questions(
    request: SimilarQuestionsRequest,
    search: SimilaritySearch = Depends(get_similarity_search),
    index: FAISSQuestionIndex = Depends(get_question_index),
    _auth: dict = Depends(require_client),
) -> SimilarQuestionsResponse:
    if len(request.embedding) != index.dimensions:
        raise HTTPException(
            status_code=400,
            detail=f"embedding must have {index.dimensions} dimensions",
        )
    results = await search.search(request.embedding, request.limit)
    return SimilarQuestionsResponse(
        results=[
            SimilarQuestionOut(
                id=r.id,
                question=r.question,
                answer=r.answer,
                citation_ids=r.citation_ids,
                similarity=r.similarity,
                citation_details=[CitationDetailOut(**vars(c)) for c in r.citation_details],
            )
            for r in results
        ]
    )


@router.get("/questions/browse", response_model=BrowseResponse)
async def browse_questions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    store: SQLiteQuestionStore = Depends(get_question_store),
    citations: SQLiteCitationStore = Depends(get_citation_store),
    _auth: dict = Depends(require_client),
) -> BrowseResponse:
    rows, total = await store.browse_questions(page=page, limit=limit, search=search.strip())
    total_pages = math.ceil(total / limit)

    questions = []
    for row in rows:
        cited = await citations.get_citations(row.citation_ids)
        questions.append(
            BrowseQuestionOut(
                id=row.id,
                question=row.question,
                answer=row.answer,
                citation_ids=row.citation_ids,
                citation_details=[
                    CitationDetailOut(
                        permalink=c.permalink,
                        content=c.content,
                        timestamp=c.timestamp,
                        username=c.username,
                    )
                    for c in cited
                ],
            )
        )

    return BrowseResponse(
        questions=questions,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )
