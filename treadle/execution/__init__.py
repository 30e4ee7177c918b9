"""Execution state: counters, limits, contexts and loop data."""

from . import keys
from .stats import Stats
from .limits import Limit, MatchMode, ExceededLimit, evaluate, default_limits
from .loop_data import Task, Iteration, LoopData, PINNED
from .context import ExecutionContext, ExecutionResult, LimitGuard, TerminationReason

__all__ = [
    "keys", "Stats", "Limit", "MatchMode", "ExceededLimit", "evaluate", "default_limits",
    "Task", "Iteration", "LoopData", "PINNED",
    "ExecutionContext", "ExecutionResult", "LimitGuard", "TerminationReason",
]
