"""Chat model provider for any OpenAI-compatible endpoint (OpenRouter, OpenAI, proxies)."""

from __future__ import annotations

from openai import AsyncOpenAI

from helpdesk_kb.exceptions import ModelUnavailable
from helpdesk_kb.generation.messages import ModelMessage, ToolCall
from helpdesk_kb.observability.logger import get_logger

logger = get_logger("openai_chat")


class OpenAIChatModel:
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        temperature: float = 0.1,
        app_title: str | None = None,
    ) -> None:
        headers = {"X-Title": app_title} if app_title else None
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, default_headers=headers)
        self._model = model
        self._temperature = temperature

    async def complete(
        self,
        messages: list[dict],
        response_format: dict | None = None,
        tools: list[dict] | None = None,
    ) -> ModelMessage:
        kwargs: dict = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature,
        }
        if response_format is not None:
            kwargs["response_format"] = response_format
        if tools:
            kwargs["tools"] = tools

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as e:
            raise ModelUnavailable(f"Chat completion failed: {e}") from e

        if not response.choices:
            logger.warning("completion_without_choices", model=self._model)
            return ModelMessage()

        message = response.choices[0].message
        tool_calls = tuple(
            ToolCall(id=c.id, name=c.function.name, arguments=c.function.arguments or "")
            for c in (message.tool_calls or [])
            if c.type == "function"
        )
        logger.debug(
            "completion",
            model=self._model,
            content_len=len(message.content or ""),
            tool_calls=len(tool_calls),
        )
        return ModelMessage(content=message.content, tool_calls=tool_calls)
