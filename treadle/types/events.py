"""Event types recorded by an ExecutionContext.

Every event carries a colon-separated ``type`` so bus subscribers can
match families with patterns such as ``"tool_call:*"``, and a ``source``
tracing label (``parent/child/iteration``) filled in by the context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ExecutionStartEvent:
    name: str
    source: str = ""
    type: str = "execution:start"


@dataclass
class ExecutionEndEvent:
    reason: str
    iterations: int = 0
    source: str = ""
    type: str = "execution:end"


@dataclass
class IterationStartEvent:
    iteration: int
    source: str = ""
    type: str = "iteration:start"


@dataclass
class IterationEndEvent:
    iteration: int
    action: str = ""
    duration_ms: int = 0
    source: str = ""
    type: str = "iteration:end"


@dataclass
class ModelCallStartEvent:
    model: str
    messages: list = field(default_factory=list)
    source: str = ""
    type: str = "model_call:start"


@dataclass
class ModelCallEndEvent:
    model: str
    response: str = ""
    usage: TokenUsage = field(default_factory=TokenUsage)
    duration_ms: int = 0
    error: Exception | None = None
    source: str = ""
    type: str = "model_call:end"


@dataclass
class ModelCallChunkEvent:
    """One streamed piece of a model response, published as it arrives."""

    model: str
    stream_id: str = ""
    topic: str = ""
    text: str = ""
    reasoning: str = ""
    source: str = ""
    type: str = "model_call:chunk"


@dataclass
class ToolCallStartEvent:
    tool_name: str
    args: Any = None
    source: str = ""
    type: str = "tool_call:start"


@dataclass
class ToolCallEndEvent:
    tool_name: str
    args: Any = None
    output: Any = None
    duration_ms: int = 0
    error: Exception | None = None
    source: str = ""
    type: str = "tool_call:end"


@dataclass
class ParseErrorEvent:
    kind: str
    raw_content: str = ""
    error: Exception | None = None
    source: str = ""
    type: str = "parse:error"


@dataclass
class ValidatorCalledEvent:
    validator: str
    answer: Any = None
    source: str = ""
    type: str = "validator:called"


@dataclass
class ValidatorResultEvent:
    validator: str
    answer: Any = None
    accepted: bool = False
    feedback: list = field(default_factory=list)
    source: str = ""
    type: str = "validator:result"


@dataclass
class LimitExceededEvent:
    limit: Any
    key: str
    value: int
    source: str = ""
    type: str = "limit:exceeded"


@dataclass
class ChildSpawnedEvent:
    child_name: str
    source: str = ""
    type: str = "child:spawned"


@dataclass
class ChildCompletedEvent:
    child_name: str
    reason: str = ""
    source: str = ""
    type: str = "child:completed"


@dataclass
class ScratchpadCompactedEvent:
    before: int
    after: int
    source: str = ""
    type: str = "scratchpad:compacted"


@dataclass
class ErrorEvent:
    error: Exception
    source: str = ""
    type: str = "error"


@dataclass
class CommonEvent:
    """User-defined event published through ``ExecutionContext.publish_event``."""

    name: str
    description: str = ""
    data: Any = None
    source: str = ""
    type: str = "common"


AgentEvent = (
    ExecutionStartEvent | ExecutionEndEvent | IterationStartEvent | IterationEndEvent
    | ModelCallStartEvent | ModelCallChunkEvent | ModelCallEndEvent | ToolCallStartEvent | ToolCallEndEvent
    | ParseErrorEvent | ValidatorCalledEvent | ValidatorResultEvent | LimitExceededEvent
    | ChildSpawnedEvent | ChildCompletedEvent | ScratchpadCompactedEvent
    | ErrorEvent | CommonEvent
)
