"""Thread ingestion endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from helpdesk_kb.api.auth import require_client
from helpdesk_kb.api.dependencies import get_ingest_pipeline
from helpdesk_kb.ingestion.pipeline import IngestionPipeline
from helpdesk_kb.models.domain import ChatMessage
from helpdesk_kb.models.schemas import IngestThreadRequest, IngestThreadResponse

router = APIRouter()


@router.post("/ingest/thread", response_model=IngestThreadResponse)
async def ingest_thread(
    request: IngestThreadRequest,
    pipeline: IngestionPipeline = Depends(get_ingest_pipeline),
    _auth: dict = Depends(require_client),
) -> IngestThreadResponse:
    thread = [ChatMessage(user=m.user, text=m.text, ts=m.ts) for m in request.thread]
    report = await pipeline.ingest_thread(request.channel_id, thread)
    return IngestThreadResponse(
        pairs_found=report.pairs_found,
        questions_stored=report.questions_stored,
        citations_stored=report.citations_stored,
        pairs_skipped=report.pairs_skipped,
        question_ids=report.question_ids,
    )
