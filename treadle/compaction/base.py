"""Compaction interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..execution import ExecutionContext


@runtime_checkable
class CompactionTrigger(Protocol):
    def should_compact(self, ctx: ExecutionContext) -> bool: ...
    def notify_compacted(self, ctx: ExecutionContext) -> None: ...


@runtime_checkable
class CompactionStrategy(Protocol):
    def compact(self, ctx: ExecutionContext) -> Any:
        """Replace ``ctx.data``'s scratchpad. May return an awaitable."""
        ...
