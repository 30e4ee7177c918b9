"""Trigger compaction when counters grow past a delta."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..execution.limits import MatchMode

if TYPE_CHECKING:
    from ..execution import ExecutionContext


@dataclass
class _Threshold:
    key: str
    mode: MatchMode
    delta: int
    last: dict[str, int] = field(default_factory=dict)


class StatThresholdTrigger:
    """Fires once a watched counter has grown by ``delta`` since the last compaction.

    Prefix thresholds watch each matching key on its own::

        trigger = StatThresholdTrigger().on_counter("iterations", 10)
        trigger.on_counter_prefix("input_tokens:", 50_000)
    """

    def __init__(self) -> None:
        self._thresholds: list[_Threshold] = []

    def on_counter(self, key: str, delta: int) -> StatThresholdTrigger:
        self._thresholds.append(_Threshold(key, MatchMode.EXACT, delta))
        return self

    def on_counter_prefix(self, prefix: str, delta: int) -> StatThresholdTrigger:
        self._thresholds.append(_Threshold(prefix, MatchMode.PREFIX, delta))
        return self

    def should_compact(self, ctx: ExecutionContext) -> bool:
        for t in self._thresholds:
            for key, value in self._values(ctx, t).items():
                if value - t.last.get(key, 0) >= t.delta:
                    return True
        return False

    def notify_compacted(self, ctx: ExecutionContext) -> None:
        for t in self._thresholds:
            t.last.update(self._values(ctx, t))

    @staticmethod
    def _values(ctx: ExecutionContext, t: _Threshold) -> dict[str, int]:
        if t.mode is MatchMode.EXACT:
            return {t.key: ctx.stats.get(t.key)}
        return ctx.stats.matching(t.key)
