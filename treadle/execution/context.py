"""ExecutionContext: per-run state, counters and limit enforcement.

Every context in one call tree shares a single LimitGuard, so a limit
set on the root also sees model and tool calls made through children.
Each publish mutates the shared counters and evaluates the limits under
one lock; the first breach is recorded for the whole tree and never
replaced.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from ..errors import AgentAbortError
from ..events import EventBus
from ..types import (
    AgentEvent, ContentPart, TokenUsage, FormattedSection,
    ExecutionStartEvent, ExecutionEndEvent, IterationStartEvent, IterationEndEvent,
    ModelCallStartEvent, ModelCallChunkEvent, ModelCallEndEvent, ToolCallStartEvent, ToolCallEndEvent,
    ParseErrorEvent, ValidatorCalledEvent, ValidatorResultEvent, LimitExceededEvent,
    ChildSpawnedEvent, ChildCompletedEvent, ScratchpadCompactedEvent, ErrorEvent, CommonEvent,
)
from . import keys
from .limits import ExceededLimit, Limit, default_limits, evaluate
from .loop_data import LoopData
from .stats import Stats

logger = logging.getLogger(__name__)


class TerminationReason(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    LIMIT_EXCEEDED = "limit_exceeded"
    ERROR = "error"


@dataclass
class ExecutionResult:
    reason: TerminationReason
    result: list[ContentPart] | None = None
    exceeded_limit: ExceededLimit | None = None
    error: Exception | None = None
    iterations: int = 0
    duration_ms: int = 0
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return "".join(p.text or "" for p in self.result or [] if p.type == "text")


class LimitGuard:
    """Stats, active limits and the first breach of one call tree."""

    def __init__(self, limits: Iterable[Limit] | None = None, stats: Stats | None = None) -> None:
        self.stats = stats or Stats()
        self._limits = list(limits) if limits is not None else default_limits()
        self._exceeded: ExceededLimit | None = None
        self._lock = threading.RLock()

    @property
    def limits(self) -> list[Limit]:
        with self._lock:
            return list(self._limits)

    def set_limits(self, limits: Iterable[Limit]) -> None:
        with self._lock:
            self._limits = list(limits)

    @property
    def exceeded(self) -> ExceededLimit | None:
        with self._lock:
            return self._exceeded

    def apply(self, mutate: Callable[[Stats], None]) -> ExceededLimit | None:
        """Run ``mutate`` then evaluate limits atomically.

        Returns the breach only when this call is the one that recorded it.
        """
        with self._lock:
            mutate(self.stats)
            if self._exceeded is not None:
                return None
            hit = evaluate(self._limits, self.stats)
            if hit is not None:
                self._exceeded = hit
            return hit


class ExecutionContext:
    """State for one run, or one nested run spawned from a parent.

    Parameters
    ----------
    data:
        Conversation state for the agent driving this context.
    name:
        Tracing label; children are addressed as ``parent/child``.
    limits:
        Initial limit set for the tree. Defaults to ``default_limits()``.
        Ignored for children, which share the parent's guard.
    bus:
        Optional EventBus that receives every recorded event.
    signal:
        Optional external cancellation flag (anything with ``is_set()``,
        e.g. ``asyncio.Event``).
    """

    def __init__(
        self,
        data: LoopData | None = None,
        name: str = "main",
        limits: Iterable[Limit] | None = None,
        bus: EventBus | None = None,
        signal: Any | None = None,
        *,
        parent: ExecutionContext | None = None,
        guard: LimitGuard | None = None,
    ) -> None:
        self.data = data
        self.name = name
        self.parent = parent
        self.depth = parent.depth + 1 if parent else 0
        self.children: list[ExecutionContext] = []
        self.bus = bus
        self.signal = signal
        self._guard = guard or LimitGuard(limits)
        self._iteration = 0
        self._reason = TerminationReason.RUNNING
        self._result: list[ContentPart] | None = None
        self._error: Exception | None = None
        self._events: list[AgentEvent] = []
        self._cancelled = threading.Event()
        self.start_time = time.monotonic()
        self.end_time: float | None = None

    # -- state ---------------------------------------------------------

    @property
    def stats(self) -> Stats:
        return self._guard.stats

    @property
    def limits(self) -> list[Limit]:
        return self._guard.limits

    def set_limits(self, limits: Iterable[Limit]) -> None:
        """Replace the limit set of the whole call tree."""
        self._guard.set_limits(limits)

    @property
    def exceeded_limit(self) -> ExceededLimit | None:
        return self._guard.exceeded

    @property
    def termination_reason(self) -> TerminationReason:
        if self._reason is TerminationReason.RUNNING and self._guard.exceeded is not None:
            return TerminationReason.LIMIT_EXCEEDED
        return self._reason

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def path(self) -> str:
        return f"{self.parent.path}/{self.name}" if self.parent else self.name

    @property
    def source(self) -> str:
        return f"{self.path}/{self._iteration}"

    @property
    def events(self) -> list[AgentEvent]:
        return list(self._events)

    @property
    def duration_ms(self) -> int:
        end = self.end_time if self.end_time is not None else time.monotonic()
        return int((end - self.start_time) * 1000)

    def set_termination(
        self,
        reason: TerminationReason,
        result: list[ContentPart] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._reason = reason
        if result is not None:
            self._result = result
        if error is not None:
            self._error = error
        if reason is not TerminationReason.RUNNING:
            self.end_time = time.monotonic()

    @property
    def result(self) -> ExecutionResult:
        return ExecutionResult(
            reason=self.termination_reason,
            result=self._result,
            exceeded_limit=self.exceeded_limit,
            error=self._error,
            iterations=self._iteration,
            duration_ms=self.duration_ms,
            stats=self.stats.snapshot(),
        )

    # -- tree ----------------------------------------------------------

    def spawn_child(self, name: str, data: LoopData | None = None) -> ExecutionContext:
        """Create a nested context sharing Stats, limits and the breach record."""
        child = ExecutionContext(
            data=data,
            name=name,
            bus=self.bus.create_child(name) if self.bus else None,
            parent=self,
            guard=self._guard,
        )
        self.children.append(child)
        self._record(ChildSpawnedEvent(child_name=name))
        return child

    def complete_child(self, child: ExecutionContext) -> None:
        if child.termination_reason is TerminationReason.RUNNING:
            child.set_termination(TerminationReason.SUCCESS)
        self._record(ChildCompletedEvent(child_name=child.name, reason=child.termination_reason.value))

    # -- cancellation --------------------------------------------------

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        sig = self.signal
        if sig is not None and hasattr(sig, "is_set") and sig.is_set():
            return True
        return self.parent.cancelled if self.parent else False

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise AgentAbortError()

    # -- publishing ----------------------------------------------------

    def publish_execution_start(self) -> None:
        self._record(ExecutionStartEvent(name=self.name))

    def publish_execution_end(self) -> None:
        self._record(ExecutionEndEvent(reason=self.termination_reason.value, iterations=self._iteration))

    def publish_before_iteration(self) -> None:
        self._iteration += 1
        logger.debug("%s: iteration %d", self.path, self._iteration)
        self._record(IterationStartEvent(iteration=self._iteration))
        self._apply(lambda s: s.incr(keys.ITERATIONS))

    def publish_after_iteration(self, action: str, duration_ms: int = 0) -> None:
        self._record(IterationEndEvent(iteration=self._iteration, action=action, duration_ms=duration_ms))

    def publish_before_model_call(self, model: str, messages: list) -> None:
        self._record(ModelCallStartEvent(model=model, messages=list(messages)))

    def publish_model_chunk(
        self, model: str, stream_id: str, topic: str, text: str = "", reasoning: str = ""
    ) -> None:
        self._record(ModelCallChunkEvent(
            model=model, stream_id=stream_id, topic=topic, text=text, reasoning=reasoning,
        ))

    def publish_after_model_call(
        self,
        model: str,
        response: str = "",
        usage: TokenUsage | None = None,
        duration_ms: int = 0,
        error: Exception | None = None,
    ) -> None:
        usage = usage or TokenUsage()
        self._record(ModelCallEndEvent(
            model=model, response=response, usage=usage, duration_ms=duration_ms, error=error,
        ))
        if error is not None:
            return

        def count(s: Stats) -> None:
            s.incr(keys.INPUT_TOKENS, usage.prompt_tokens)
            s.incr(keys.input_tokens_for(model), usage.prompt_tokens)
            s.incr(keys.OUTPUT_TOKENS, usage.completion_tokens)
            s.incr(keys.output_tokens_for(model), usage.completion_tokens)

        self._apply(count)

    def publish_before_tool_call(self, tool: str, args: Any = None) -> ToolCallStartEvent:
        """Count the call and return the event.

        Subscribers may replace or mutate ``event.args``; callers run the
        tool with whatever the event holds afterwards.
        """
        event = ToolCallStartEvent(tool_name=tool, args=args)
        self._record(event)

        def count(s: Stats) -> None:
            s.incr(keys.TOOL_CALLS)
            s.incr(keys.tool_calls_for(tool))

        self._apply(count)
        return event

    def publish_after_tool_call(
        self,
        tool: str,
        args: Any = None,
        output: Any = None,
        duration_ms: int = 0,
        error: Exception | None = None,
    ) -> None:
        self._record(ToolCallEndEvent(
            tool_name=tool, args=args, output=output, duration_ms=duration_ms, error=error,
        ))

        def count(s: Stats) -> None:
            if error is not None:
                s.incr(keys.TOOL_CALLS_ERROR)
                s.incr(keys.tool_calls_error_for(tool))
                s.incr(keys.TOOL_CALLS_ERROR_CONSECUTIVE)
                s.incr(keys.tool_calls_error_consecutive_for(tool))
            else:
                s.reset(keys.TOOL_CALLS_ERROR_CONSECUTIVE)
                s.reset(keys.tool_calls_error_consecutive_for(tool))

        self._apply(count)

    def publish_parse_error(self, kind: str, raw_content: str, error: Exception | None) -> None:
        total, consecutive = keys.parse_error_total(kind), keys.parse_error_consecutive(kind)
        logger.debug("%s: %s parse error: %s", self.path, kind, error)
        self._record(ParseErrorEvent(kind=kind, raw_content=raw_content, error=error))

        def count(s: Stats) -> None:
            s.incr(total)
            s.incr(consecutive)

        self._apply(count)

    def publish_parse_success(self, kind: str) -> None:
        consecutive = keys.parse_error_consecutive(kind)
        self._apply(lambda s: s.reset(consecutive))

    def publish_validator_called(self, validator: str, answer: Any) -> None:
        self._record(ValidatorCalledEvent(validator=validator, answer=answer))

    def publish_validator_result(
        self,
        validator: str,
        answer: Any,
        accepted: bool,
        feedback: list[FormattedSection] | None = None,
    ) -> None:
        self._record(ValidatorResultEvent(
            validator=validator, answer=answer, accepted=accepted, feedback=list(feedback or []),
        ))
        if accepted:
            return

        def count(s: Stats) -> None:
            s.incr(keys.ANSWER_REJECTED_TOTAL)
            s.incr(keys.answer_rejected_by(validator))

        self._apply(count)

    def publish_scratchpad_compacted(self, before: int, after: int) -> None:
        self._record(ScratchpadCompactedEvent(before=before, after=after))

    def publish_error(self, error: Exception) -> None:
        self._record(ErrorEvent(error=error))

    def publish_event(self, name: str, description: str = "", data: Any = None) -> None:
        self._record(CommonEvent(name=name, description=description, data=data))

    # -- internals -----------------------------------------------------

    def _apply(self, mutate: Callable[[Stats], None]) -> None:
        hit = self._guard.apply(mutate)
        if hit is not None:
            logger.warning(
                "%s: limit exceeded: %s %s > %d (value %d)",
                self.path, hit.limit.mode.value, hit.key, hit.limit.max_value, hit.value,
            )
            self._record(LimitExceededEvent(limit=hit.limit, key=hit.key, value=hit.value))

    def _record(self, event: AgentEvent) -> None:
        event.source = self.source
        self._events.append(event)
        if self.bus:
            self.bus.emit(event)

    def __repr__(self) -> str:
        return (
            f"ExecutionContext(path={self.path!r}, iteration={self._iteration}, "
            f"reason={self.termination_reason.value})"
        )
