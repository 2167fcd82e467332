"""Slack message text extraction and answer rendering."""

from __future__ import annotations

from helpdesk_kb.models.domain import AnswerResult, ChatMessage


def extract_plaintext(message: dict) -> str:
    """Concatenate the text of rich-text elements, falling back to `text`."""
    parts = []
    for block in message.get("blocks") or []:
        for section in block.get("elements") or []:
            for element in section.get("elements") or []:
                parts.append(element.get("text") or "")
    text = "".join(parts).strip()
    if text:
        return text
    return (message.get("text") or "").strip()


def to_chat_message(message: dict) -> ChatMessage:
    return ChatMessage(
        user=message.get("user"),
        text=extract_plaintext(message),
        ts=message.get("ts"),
    )


def format_sources(sources: list[str]) -> str:
    return " ".join(f"<{url}|#{i}>" for i, url in enumerate(sources, 1))


def render_answer_blocks(result: AnswerResult) -> list[dict]:
    blocks: list[dict] = [{"type": "markdown", "text": result.answer}]
    if result.sources:
        blocks.append({"type": "divider"})
        blocks.append(
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"Sources: {format_sources(result.sources)}"},
            }
        )
    return blocks
