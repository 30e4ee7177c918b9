"""Core type definitions, re-exported from sub-modules."""

from .messages import Message, SystemMessage, UserMessage, AssistantMessage, ContentPart, text_of
from .tools import (
    ToolSchema, ToolDefinition, ToolContext, ToolCall, ToolCallResult, ToolChainResult,
)
from .sections import (
    FormattedSection, OutputSection, TerminationStatus, TerminationResult, ValidationResult,
)
from .events import (
    AgentEvent, TokenUsage, ExecutionStartEvent, ExecutionEndEvent,
    IterationStartEvent, IterationEndEvent, ModelCallStartEvent, ModelCallChunkEvent, ModelCallEndEvent,
    ToolCallStartEvent, ToolCallEndEvent, ParseErrorEvent, ValidatorCalledEvent,
    ValidatorResultEvent, LimitExceededEvent, ChildSpawnedEvent, ChildCompletedEvent,
    ScratchpadCompactedEvent, ErrorEvent, CommonEvent,
)
from .llm import CompletionParams, CompletionResult, StreamChunk, Model, StreamingModel, FinishReason

__all__ = [
    "Message", "SystemMessage", "UserMessage", "AssistantMessage", "ContentPart", "text_of",
    "ToolSchema", "ToolDefinition", "ToolContext", "ToolCall", "ToolCallResult", "ToolChainResult",
    "FormattedSection", "OutputSection", "TerminationStatus", "TerminationResult", "ValidationResult",
    "AgentEvent", "TokenUsage", "ExecutionStartEvent", "ExecutionEndEvent",
    "IterationStartEvent", "IterationEndEvent", "ModelCallStartEvent", "ModelCallChunkEvent", "ModelCallEndEvent",
    "ToolCallStartEvent", "ToolCallEndEvent", "ParseErrorEvent", "ValidatorCalledEvent",
    "ValidatorResultEvent", "LimitExceededEvent", "ChildSpawnedEvent", "ChildCompletedEvent",
    "ScratchpadCompactedEvent", "ErrorEvent", "CommonEvent",
    "CompletionParams", "CompletionResult", "StreamChunk", "Model", "StreamingModel", "FinishReason",
]
