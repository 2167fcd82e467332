"""Protocol for the outbound chat platform boundary."""

from __future__ import annotations

from typing import Protocol

from helpdesk_kb.models.domain import ChatMessage


class ChatPlatform(Protocol):
    async def resolve_permalink(self, channel_id: str, message_ts: str) -> str:
        """Raises CitationResolutionFailed when the lookup fails."""
        ...

    async def lookup_user(self, user_id: str) -> str:
        """Raises CitationResolutionFailed when the lookup fails."""
        ...

    async def post_message(
        self, channel_id: str, thread_ts: str, text: str, blocks: list[dict]
    ) -> None: ...

    async def fetch_thread(self, channel_id: str, thread_ts: str) -> list[ChatMessage]: ...
