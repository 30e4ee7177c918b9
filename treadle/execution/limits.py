"""Declarative limits evaluated against Stats."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from . import keys
from .stats import Stats


class MatchMode(str, Enum):
    EXACT = "exact"
    PREFIX = "prefix"


@dataclass(frozen=True)
class Limit:
    """Breached when a matching counter is strictly greater than ``max_value``."""

    mode: MatchMode
    key: str
    max_value: int

    @classmethod
    def exact(cls, key: str, max_value: int) -> Limit:
        return cls(MatchMode.EXACT, key, max_value)

    @classmethod
    def prefix(cls, prefix: str, max_value: int) -> Limit:
        return cls(MatchMode.PREFIX, prefix, max_value)

    def check(self, stats: Stats) -> ExceededLimit | None:
        if self.mode is MatchMode.EXACT:
            value = stats.get(self.key)
            if value > self.max_value:
                return ExceededLimit(self, self.key, value)
            return None
        # Each matching key is judged on its own, never summed.
        for key, value in stats.matching(self.key).items():
            if value > self.max_value:
                return ExceededLimit(self, key, value)
        return None


@dataclass(frozen=True)
class ExceededLimit:
    limit: Limit
    key: str
    value: int


def evaluate(limits: Iterable[Limit], stats: Stats) -> ExceededLimit | None:
    """Return the first breached limit in rule order."""
    for limit in limits:
        hit = limit.check(stats)
        if hit is not None:
            return hit
    return None


def default_limits() -> list[Limit]:
    return [
        Limit.exact(keys.ITERATIONS, 100),
        Limit.exact(keys.FORMAT_PARSE_ERROR_CONSECUTIVE, 3),
        Limit.exact(keys.TOOLCHAIN_PARSE_ERROR_CONSECUTIVE, 3),
        Limit.exact(keys.SECTION_PARSE_ERROR_CONSECUTIVE, 3),
        Limit.exact(keys.TOOL_CALLS_ERROR_CONSECUTIVE, 3),
        Limit.exact(keys.ANSWER_REJECTED_TOTAL, 10),
    ]
