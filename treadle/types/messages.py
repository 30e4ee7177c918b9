"""Message types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ContentPart:
    type: str = "text"  # "text" | "image"
    text: str | None = None
    image_url: str | None = None


@dataclass
class SystemMessage:
    content: str
    role: str = "system"


@dataclass
class UserMessage:
    content: str | list[ContentPart] = ""
    role: str = "user"


@dataclass
class AssistantMessage:
    content: str
    role: str = "assistant"


Message = SystemMessage | UserMessage | AssistantMessage


def text_of(message: Message) -> str:
    """Concatenate the text parts of a message."""
    content = message.content
    if isinstance(content, str):
        return content
    return "".join(p.text or "" for p in content if p.type == "text")
