"""Fold older scratchpad iterations into a model-written summary."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..execution import Iteration, TerminationReason
from ..models import generate
from ..types import Model, UserMessage, text_of

if TYPE_CHECKING:
    from ..execution import ExecutionContext

logger = logging.getLogger(__name__)

SUMMARY_ORIGIN = "summary"

DEFAULT_SUMMARY_PROMPT = """You condense the working notes of an AI agent so it can carry on without them.

{summary}

## Messages to fold in

{messages}

## How to write the summary

Keep every decision, finding and open action item. Keep exact values such as
numbers, names, identifiers and paths. Mention errors that came up and how they
were handled. Keep tool results that later steps may rely on. Be brief, but do
not drop anything the agent still needs.

Reply with the summary only."""


class SummarizationStrategy:
    """Replace older unpinned iterations with one summary iteration.

    The newest ``keep_recent`` unpinned iterations stay as they are
    (``0`` summarizes all of them) and pinned iterations always survive.
    A summary from an earlier compaction is handed back to the model and
    replaced, so there is never more than one. The model runs on a child
    context named ``compaction``, so its tokens count against the tree's
    limits; model errors propagate.

    ``prompt`` is a ``str.format`` template with ``{summary}`` and
    ``{messages}`` fields::

        strategy = SummarizationStrategy(model, keep_recent=4)
    """

    def __init__(self, model: Model, keep_recent: int = 0, prompt: str = DEFAULT_SUMMARY_PROMPT) -> None:
        if keep_recent < 0:
            raise ValueError("keep_recent must be >= 0")
        self.model = model
        self.keep_recent = keep_recent
        self.prompt = prompt

    def with_keep_recent(self, n: int) -> SummarizationStrategy:
        if n < 0:
            raise ValueError("keep_recent must be >= 0")
        self.keep_recent = n
        return self

    def with_prompt(self, prompt: str) -> SummarizationStrategy:
        self.prompt = prompt
        return self

    async def compact(self, ctx: ExecutionContext) -> None:
        data = ctx.data
        pinned: list[Iteration] = []
        previous: Iteration | None = None
        candidates: list[Iteration] = []
        for it in data.scratchpad:
            if it.pinned:
                pinned.append(it)
            elif it.metadata.get("origin") == SUMMARY_ORIGIN:
                previous = it
            else:
                candidates.append(it)

        if self.keep_recent:
            split = len(candidates) - self.keep_recent
            if split <= 0:
                return
            folded, kept = candidates[:split], candidates[split:]
        else:
            folded, kept = candidates, []
        if not folded:
            return

        summary = await self._summarize(ctx, previous, folded)
        synthetic = Iteration(
            messages=[UserMessage(content=summary)],
            metadata={"origin": SUMMARY_ORIGIN},
        )
        data.set_scratchpad([synthetic, *pinned, *kept])
        logger.debug("%s: summarized %d iterations", ctx.path, len(folded))

    async def _summarize(self, ctx: ExecutionContext, previous: Iteration | None, folded: list[Iteration]) -> str:
        if previous is not None:
            summary = "## Summary so far\n\n" + _iteration_text(previous)
        else:
            summary = "## Summary so far\n\nNone yet."
        messages = "\n\n".join(
            f"### Message {n}\n\n{_iteration_text(it)}" for n, it in enumerate(folded, 1)
        )
        prompt = self.prompt.format(summary=summary, messages=messages)

        child = ctx.spawn_child("compaction")
        try:
            response = await generate(
                child,
                self.model,
                [UserMessage(content=prompt)],
                stream_id=f"compaction-summarization-{ctx.iteration}",
                topic="compaction",
            )
        except Exception as e:
            child.set_termination(TerminationReason.ERROR, error=e)
            raise
        finally:
            ctx.complete_child(child)
        return response.content.strip()


def _iteration_text(iteration: Iteration) -> str:
    # Non-text parts are dropped; pin an iteration to keep them.
    return "\n".join(text_of(m) for m in iteration.messages)
