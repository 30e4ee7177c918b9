"""Tool types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..execution.context import ExecutionContext


@runtime_checkable
class ToolSchema(Protocol):
    def parse(self, raw: Any) -> Any: ...
    def to_json_schema(self) -> dict: ...


@dataclass
class ToolDefinition:
    name: str
    description: str
    parameters: ToolSchema
    execute: Any  # (input, ctx: ToolContext) -> Any | Awaitable[Any]


@dataclass
class ToolContext:
    """Handed to every tool call.

    ``execution`` is the calling ExecutionContext; tools that drive their
    own model calls spawn a child from it so their usage counts against
    the same limits.
    """

    execution: ExecutionContext | None = None
    tool_name: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolCall:
    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolCallResult:
    name: str
    output: Any = None
    text: str = ""


@dataclass
class ToolChainResult:
    """Rendered observation plus per-call records.

    ``results[i]`` and ``errors[i]`` describe ``calls[i]``; exactly one of
    them is set.
    """

    text: str
    calls: list[ToolCall] = field(default_factory=list)
    results: list[ToolCallResult | None] = field(default_factory=list)
    errors: list[Exception | None] = field(default_factory=list)
