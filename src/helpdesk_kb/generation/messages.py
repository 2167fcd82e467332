"""Provider-neutral representation of a model reply message."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    arguments: str  # raw JSON string as emitted by the model


@dataclass(frozen=True)
class ModelMessage:
    content: str | None = None
    tool_calls: tuple[ToolCall, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        return (self.content or "").strip()

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.tool_calls

    def to_dict(self, tool_calls: tuple[ToolCall, ...] | None = None) -> dict:
        """Render as an assistant message in chat-completions format.

        `tool_calls` overrides which calls are echoed back; every echoed call
        must be answered by a `tool` message in the next request.
        """
        calls = self.tool_calls if tool_calls is None else tool_calls
        message: dict = {"role": "assistant", "content": self.content or ""}
        if calls:
            message["tool_calls"] = [
                {
                    "id": c.id,
                    "type": "function",
                    "function": {"name": c.name, "arguments": c.arguments},
                }
                for c in calls
            ]
        return message
