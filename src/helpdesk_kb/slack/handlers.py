"""Slack event handlers: answer new questions, ingest resolved threads."""

from __future__ import annotations

from slack_bolt.async_app import AsyncApp

from helpdesk_kb.answering.engine import AnswerEngine
from helpdesk_kb.ingestion.pipeline import IngestionPipeline
from helpdesk_kb.models.domain import AnswerResult, IngestReport
from helpdesk_kb.observability.logger import get_logger
from helpdesk_kb.protocols.chat import ChatPlatform
from helpdesk_kb.slack.formatting import extract_plaintext, render_answer_blocks

logger = get_logger("slack_handlers")


class SlackEventHandlers:
    def __init__(
        self,
        engine: AnswerEngine,
        ingestion: IngestionPipeline,
        chat: ChatPlatform,
        channel_id: str = "",
        resolved_reaction: str = "white_check_mark",
    ) -> None:
        self._engine = engine
        self._ingestion = ingestion
        self._chat = chat
        self._channel_id = channel_id
        self._resolved_reaction = resolved_reaction

    def _watches(self, channel_id: str | None) -> bool:
        # An empty channel id means every channel the bot is in
        return not self._channel_id or channel_id == self._channel_id

    async def on_message(self, event: dict) -> AnswerResult | None:
        channel_id = event.get("channel")
        if not self._watches(channel_id):
            return None
        if event.get("subtype") or event.get("bot_id"):
            return None
        if event.get("thread_ts"):
            return None

        text = extract_plaintext(event)
        if not text:
            return None

        result = await self._engine.answer_question(text)
        logger.info("answered_message", channel=channel_id, has_answer=result.has_answer)
        if not result.has_answer:
            return result

        await self._chat.post_message(
            channel_id=channel_id,
            thread_ts=event["ts"],
            text=result.answer,
            blocks=render_answer_blocks(result),
        )
        return result

    async def on_reaction_added(self, event: dict) -> IngestReport | None:
        item = event.get("item") or {}
        channel_id = item.get("channel")
        if not self._watches(channel_id):
            return None
        if event.get("reaction") != self._resolved_reaction:
            return None
        if item.get("type", "message") != "message" or not item.get("ts"):
            return None

        thread = await self._chat.fetch_thread(channel_id, item["ts"])
        if not thread:
            logger.info("resolved_thread_empty", channel=channel_id, ts=item["ts"])
            return None
        return await self._ingestion.ingest_thread(channel_id, thread)


def register_handlers(app: AsyncApp, handlers: SlackEventHandlers) -> None:
    @app.event("message")
    async def handle_message(event: dict) -> None:
        await handlers.on_message(event)

    @app.event("reaction_added")
    async def handle_reaction_added(event: dict) -> None:
        await handlers.on_reaction_added(event)
