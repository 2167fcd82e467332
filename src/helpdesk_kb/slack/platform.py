"""Outbound Slack Web API calls used by ingestion and answering."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import aiohttp
from slack_sdk.errors import SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from helpdesk_kb.exceptions import CitationResolutionFailed
from helpdesk_kb.models.domain import ChatMessage
from helpdesk_kb.observability.logger import get_logger
from helpdesk_kb.slack.formatting import to_chat_message

logger = get_logger("slack_platform")

_PAGE_SIZE = 200


class SlackPlatform:
    def __init__(self, client: AsyncWebClient) -> None:
        self._client = client

    async def resolve_permalink(self, channel_id: str, message_ts: str) -> str:
        try:
            response = await self._client.chat_getPermalink(
                channel=channel_id, message_ts=message_ts
            )
        except (SlackClientError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise CitationResolutionFailed(f"Permalink lookup failed for {message_ts}: {e}") from e
        permalink = response.get("permalink")
        if not permalink:
            raise CitationResolutionFailed(f"No permalink returned for {message_ts}")
        return permalink

    async def lookup_user(self, user_id: str) -> str:
        try:
            response = await self._client.users_info(user=user_id)
        except (SlackClientError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise CitationResolutionFailed(f"User lookup failed for {user_id}: {e}") from e
        user = response.get("user") or {}
        return user.get("real_name") or user.get("name") or user_id

    async def post_message(
        self, channel_id: str, thread_ts: str, text: str, blocks: list[dict]
    ) -> None:
        await self._client.chat_postMessage(
            channel=channel_id, thread_ts=thread_ts, text=text, blocks=blocks
        )
        logger.info("posted_answer", channel=channel_id, thread_ts=thread_ts)

    async def fetch_thread(self, channel_id: str, thread_ts: str) -> list[ChatMessage]:
        messages: list[ChatMessage] = []
        cursor = None
        while True:
            response = await self._client.conversations_replies(
                channel=channel_id, ts=thread_ts, cursor=cursor, limit=_PAGE_SIZE
            )
            messages.extend(to_chat_message(m) for m in response.get("messages") or [])
            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                break
        logger.debug("fetched_thread", channel=channel_id, thread_ts=thread_ts, messages=len(messages))
        return messages

    async def list_resolved_threads(self, channel_id: str, reaction: str) -> AsyncIterator[str]:
        """Yield root timestamps of channel messages carrying `reaction`."""
        cursor = None
        while True:
            response = await self._client.conversations_history(
                channel=channel_id, cursor=cursor, limit=_PAGE_SIZE
            )
            for message in response.get("messages") or []:
                reactions = message.get("reactions") or []
                if message.get("ts") and any(r.get("name") == reaction for r in reactions):
                    yield message["ts"]
            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                break
