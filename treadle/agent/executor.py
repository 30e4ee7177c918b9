"""Executor: drive an agent step by step until it answers or a limit fires."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Iterable

from ..compaction import CompactionStrategy, CompactionTrigger
from ..execution import ExecutionContext, ExecutionResult, Limit, LoopData, Task, TerminationReason
from .react import AgentLoop, LoopAction

logger = logging.getLogger(__name__)


class Executor:
    """Outer loop around ``AgentLoop.step``.

    Each pass publishes the iteration (which counts against limits),
    stops with LIMIT_EXCEEDED if anything in the call tree has breached,
    and otherwise runs one step. A breach recorded during a step wins
    over that step's TERMINATE. Errors raised by a step end the run as
    ERROR and are re-raised to the caller.
    """

    def __init__(
        self,
        agent: AgentLoop,
        limits: Iterable[Limit] | None = None,
        trigger: CompactionTrigger | None = None,
        strategy: CompactionStrategy | None = None,
    ) -> None:
        if (trigger is None) != (strategy is None):
            raise ValueError("compaction needs both a trigger and a strategy")
        self.agent = agent
        self.limits = list(limits) if limits is not None else None
        self.trigger = trigger
        self.strategy = strategy

    async def run(self, task: str | Task, **ctx_kwargs) -> ExecutionResult:
        """Convenience wrapper: build a root context for ``task`` and execute it."""
        if isinstance(task, str):
            task = Task(text=task)
        ctx = ExecutionContext(LoopData(task), **ctx_kwargs)
        return await self.execute(ctx)

    async def execute(self, ctx: ExecutionContext) -> ExecutionResult:
        if self.limits is not None:
            ctx.set_limits(self.limits)
        ctx.publish_execution_start()
        try:
            while ctx.termination_reason is TerminationReason.RUNNING:
                ctx.raise_if_cancelled()
                await self._maybe_compact(ctx)

                ctx.publish_before_iteration()
                if ctx.exceeded_limit is not None:
                    ctx.set_termination(TerminationReason.LIMIT_EXCEEDED)
                    break

                t0 = time.monotonic()
                outcome = await self.agent.step(ctx)
                ctx.publish_after_iteration(outcome.action.value, int((time.monotonic() - t0) * 1000))

                if ctx.exceeded_limit is not None:
                    ctx.set_termination(TerminationReason.LIMIT_EXCEEDED)
                elif outcome.action is LoopAction.TERMINATE:
                    ctx.set_termination(TerminationReason.SUCCESS, outcome.result)
        except (Exception, asyncio.CancelledError) as e:
            logger.debug("%s: step failed at iteration %d: %r", ctx.path, ctx.iteration, e)
            ctx.set_termination(TerminationReason.ERROR, error=e)
            ctx.publish_error(e)
            ctx.publish_execution_end()
            raise

        if ctx.exceeded_limit is not None:
            # A tree that breached before this run never enters the loop.
            if ctx.end_time is None:
                ctx.set_termination(TerminationReason.LIMIT_EXCEEDED)
            hit = ctx.exceeded_limit
            logger.info("%s: stopped by limit %s (%d > %d)", ctx.path, hit.key, hit.value, hit.limit.max_value)
        ctx.publish_execution_end()
        return ctx.result

    async def _maybe_compact(self, ctx: ExecutionContext) -> None:
        if self.trigger is None or ctx.data is None:
            return
        if not self.trigger.should_compact(ctx):
            return
        before = len(ctx.data.scratchpad)
        outcome = self.strategy.compact(ctx)
        if inspect.isawaitable(outcome):
            await outcome
        self.trigger.notify_compacted(ctx)
        ctx.publish_scratchpad_compacted(before, len(ctx.data.scratchpad))
