"""Citation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from helpdesk_kb.api.auth import require_client
from helpdesk_kb.api.dependencies import get_citation_store
from helpdesk_kb.models.schemas import CitationCreate, CitationOut
from helpdesk_kb.storage.sqlite_citation_store import SQLiteCitationStore

router = APIRouter(prefix="/citations")


@router.post("", response_model=CitationOut)
async def create_citation(
    request: CitationCreate,
    store: SQLiteCitationStore = Depends(get_citation_store),
    _auth: dict = Depends(require_client),
) -> CitationOut:
    citation = await store.create_citation(
        permalink=request.permalink,
        content=request.content,
        timestamp=request.timestamp,
        username=request.username or "",
    )
    return CitationOut(
        id=citation.id,
        permalink=citation.permalink,
        content=citation.content,
        timestamp=citation.timestamp,
        username=citation.username,
    )


@router.get("", response_model=list[CitationOut])
async def get_citations(
    ids: str = "",
    store: SQLiteCitationStore = Depends(get_citation_store),
    _auth: dict = Depends(require_client),
) -> list[CitationOut]:
    id_list = [i.strip() for i in ids.split(",") if i.strip()]
    if not id_list:
        raise HTTPException(status_code=400, detail="ids parameter is required")
    citations = await store.get_citations(id_list)
    return [
        CitationOut(
            id=c.id,
            permalink=c.permalink,
            content=c.content,
            timestamp=c.timestamp,
            username=c.username,
        )
        for c in citations
    ]
