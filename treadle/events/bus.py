"""Event bus for agent runs.

Two ways to listen:

* callbacks keyed by event type (``on``), by ``family:*`` pattern
  (``on_pattern``) or for everything (``on_all``);
* subscriber objects (``subscribe``) that implement any subset of the
  ``on_<type>`` methods, where ``<type>`` is the event type with ``:``
  replaced by ``_``. A subscriber with ``on_tool_call_start`` and
  ``on_error`` receives only those two events::

      class ToolLog:
          def on_tool_call_start(self, event):
              print("calling", event.tool_name)

      bus.subscribe(ToolLog())

Events emitted on a child bus are delivered to the parent afterwards, so
a subscriber on the root sees the whole call tree.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

from ..errors import EventRecursionError
from ..types import AgentEvent

logger = logging.getLogger(__name__)

Handler = Callable[[AgentEvent], None]

DEFAULT_MAX_RECURSION = 10


def subscriber_method(event_type: str) -> str:
    """``tool_call:start`` -> ``on_tool_call_start``."""
    return "on_" + event_type.replace(":", "_")


class EventBus:
    """Synchronous event bus with parent-child propagation.

    Handlers run inline on the publishing thread. A failing handler is
    logged and skipped; it never interrupts the run that published.

    A handler may publish further events. Nesting deeper than
    ``max_recursion`` raises ``EventRecursionError`` from the innermost
    ``emit``; the handler that caused it is then logged like any other
    failing handler.
    """

    def __init__(
        self,
        name: str | None = None,
        parent: EventBus | None = None,
        max_recursion: int | None = None,
    ) -> None:
        self.name = name
        self._parent = parent
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._wildcard: list[Handler] = []
        self._subscribers: list[Any] = []
        self._depth = 0
        if max_recursion is None:
            max_recursion = parent.max_recursion if parent else DEFAULT_MAX_RECURSION
        self.set_max_recursion(max_recursion)

    @property
    def max_recursion(self) -> int:
        return self._max_recursion

    def set_max_recursion(self, depth: int) -> EventBus:
        if depth < 1:
            raise ValueError("max_recursion must be >= 1")
        self._max_recursion = depth
        return self

    def create_child(self, name: str) -> EventBus:
        return EventBus(name=name, parent=self)

    # -- registration --------------------------------------------------

    def on(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def on_pattern(self, pattern: str, handler: Handler) -> None:
        if not pattern.endswith(":*"):
            raise ValueError(f"pattern must end with ':*', got {pattern!r}")
        self._handlers[pattern].append(handler)

    def on_all(self, handler: Handler) -> None:
        self._wildcard.append(handler)

    def off(self, event_type: str, handler: Handler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
        if handler in self._wildcard:
            self._wildcard.remove(handler)

    def subscribe(self, subscriber: Any) -> EventBus:
        """Register an object with ``on_<type>`` methods. Called in registration order."""
        self._subscribers.append(subscriber)
        return self

    def unsubscribe(self, subscriber: Any) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    # -- dispatch ------------------------------------------------------

    def emit(self, event: AgentEvent) -> None:
        if self._depth >= self._max_recursion:
            raise EventRecursionError(getattr(event, "type", ""), self._max_recursion)
        self._depth += 1
        try:
            self._dispatch(event)
        finally:
            self._depth -= 1
        if self._parent:
            self._parent.emit(event)

    def _dispatch(self, event: AgentEvent) -> None:
        event_type = getattr(event, "type", "")
        for h in self._handlers.get(event_type, []) + self._wildcard:
            self._call(h, event, event_type)

        method = subscriber_method(event_type)
        for sub in list(self._subscribers):
            h = getattr(sub, method, None)
            if callable(h):
                self._call(h, event, f"{type(sub).__name__}.{method}")

        # 'tool_call:*' matches 'tool_call:start', 'tool_call:end'
        for pat, handlers in list(self._handlers.items()):
            if pat.endswith(":*") and event_type.startswith(pat[:-1]):
                for h in handlers:
                    self._call(h, event, pat)

    @staticmethod
    def _call(handler: Handler, event: AgentEvent, label: str) -> None:
        try:
            handler(event)
        except Exception:
            logger.exception("Event handler error for %s", label)
