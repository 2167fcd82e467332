"""AI endpoints: answer a question, extract QA pairs from a thread."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from helpdesk_kb.answering.engine import AnswerEngine
from helpdesk_kb.api.auth import require_client
from helpdesk_kb.api.dependencies import get_answer_engine, get_thread_parser
from helpdesk_kb.models.domain import ChatMessage
from helpdesk_kb.models.schemas import (
    AnswerRequest,
    AnswerResponse,
    ParseThreadRequest,
    ParseThreadResponse,
    QAPair,
)
from helpdesk_kb.parsing.thread_parser import ThreadParser

router = APIRouter(prefix="/ai")


@router.post("/answer", response_model=AnswerResponse, response_model_exclude_none=True)
async def answer(
    request: AnswerRequest,
    engine: AnswerEngine = Depends(get_answer_engine),
    _auth: dict = Depends(require_client),
) -> AnswerResponse:
    question = request.question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="Question is required")
    result = await engine.answer_question(question)
    return AnswerResponse(answer=result.answer, has_answer=result.has_answer, sources=result.sources)


@router.post("/parse-qas", response_model=ParseThreadResponse)
async def parse_qas(
    request: ParseThreadRequest,
    parser: ThreadParser = Depends(get_thread_parser),
    _auth: dict = Depends(require_client),
) -> ParseThreadResponse:
    thread = [ChatMessage(user=m.user, text=m.text, ts=m.ts) for m in request.thread]
    pairs = await parser.parse_thread(thread)
    return ParseThreadResponse(
        qa_pairs=[QAPair(question=p.question, answer=p.answer, citations=p.citations) for p in pairs]
    )
