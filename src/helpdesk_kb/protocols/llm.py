"""Protocol for chat-completion model providers."""

from __future__ import annotations

from typing import Protocol

from helpdesk_kb.generation.messages import ModelMessage


class ChatModel(Protocol):
    async def complete(
        self,
        messages: list[dict],
        response_format: dict | None = None,
        tools: list[dict] | None = None,
    ) -> ModelMessage:
        """Raises ModelUnavailable on transport failure."""
        ...
