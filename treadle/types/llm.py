"""Model provider types."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

from .events import TokenUsage
from .messages import Message

FinishReason = Literal["stop", "length"]


@dataclass
class CompletionParams:
    messages: list[Message]
    max_tokens: int = 4096
    temperature: float = 0.7
    stop: list[str] | None = None


@dataclass
class CompletionResult:
    content: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: FinishReason = "stop"
    reasoning: str = ""


@dataclass
class StreamChunk:
    text: str | None = None
    reasoning: str | None = None
    usage: TokenUsage | None = None  # usually only on the final chunk
    finish_reason: str | None = None


@runtime_checkable
class Model(Protocol):
    name: str

    async def complete(self, params: CompletionParams) -> CompletionResult: ...


@runtime_checkable
class StreamingModel(Model, Protocol):
    def stream(self, params: CompletionParams) -> AsyncIterator[StreamChunk]: ...
