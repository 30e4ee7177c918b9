"""Keep only the most recent scratchpad iterations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..execution import ExecutionContext


class SlidingWindowStrategy:
    """Keep the last ``window_size`` unpinned iterations plus every pinned one.

    Survivors keep their original order.
    """

    def __init__(self, window_size: int) -> None:
        if window_size < 1:
            raise ValueError("window_size must be >= 1")
        self.window_size = window_size

    def compact(self, ctx: ExecutionContext) -> None:
        data = ctx.data
        scratchpad = data.scratchpad
        unpinned = [it for it in scratchpad if not it.pinned]
        if len(unpinned) <= self.window_size:
            return
        kept = {id(it) for it in unpinned[-self.window_size:]}
        data.set_scratchpad([it for it in scratchpad if it.pinned or id(it) in kept])
