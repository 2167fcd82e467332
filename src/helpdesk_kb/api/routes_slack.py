"""Slack Events API endpoint served through slack_bolt's FastAPI adapter."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

router = APIRouter()


@router.post("/slack/events")
async def slack_events(request: Request):
    handler = getattr(request.app.state, "slack_handler", None)
    if handler is None:
        raise HTTPException(status_code=503, detail="Slack integration not configured")
    return await handler.handle(request)
