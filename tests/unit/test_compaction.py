"""Scratchpad compaction: sliding window, summarization and stat threshold trigger."""

import pytest

from fixtures.mock_providers import FailingModel, MockToolChain, ScriptedModel
from treadle.agent import Executor, ReactAgent
from treadle.compaction import (
    SUMMARY_ORIGIN, CompactionStrategy, CompactionTrigger, SlidingWindowStrategy, StatThresholdTrigger,
    SummarizationStrategy,
)
from treadle.errors import ModelError
from treadle.execution import Iteration, Limit, TerminationReason, keys
from treadle.types import AssistantMessage, text_of


def _fill(ctx, n, pinned=()):
    items = []
    for i in range(n):
        it = Iteration(messages=[AssistantMessage(content=f"turn {i}")])
        if i in pinned:
            it.pin()
        ctx.data.add_scratchpad(it)
        items.append(it)
    return items


class TestSlidingWindow:
    def test_keeps_last_n(self, ctx):
        items = _fill(ctx, 5)
        SlidingWindowStrategy(2).compact(ctx)
        assert ctx.data.scratchpad == items[3:]

    def test_pinned_survive_in_order(self, ctx):
        items = _fill(ctx, 6, pinned={1})
        SlidingWindowStrategy(2).compact(ctx)
        assert ctx.data.scratchpad == [items[1], items[4], items[5]]

    def test_short_scratchpad_untouched(self, ctx):
        items = _fill(ctx, 2)
        SlidingWindowStrategy(3).compact(ctx)
        assert ctx.data.scratchpad == items

    def test_history_untouched(self, ctx):
        _fill(ctx, 4)
        for it in ctx.data.scratchpad:
            ctx.data.add_history(it)
        SlidingWindowStrategy(1).compact(ctx)
        assert len(ctx.data.history) == 4

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            SlidingWindowStrategy(0)

    def test_protocol(self):
        assert isinstance(SlidingWindowStrategy(1), CompactionStrategy)


class TestStatThresholdTrigger:
    def test_exact_counter(self, ctx):
        trigger = StatThresholdTrigger().on_counter(keys.ITERATIONS, 3)
        ctx.stats.incr(keys.ITERATIONS, 2)
        assert not trigger.should_compact(ctx)
        ctx.stats.incr(keys.ITERATIONS)
        assert trigger.should_compact(ctx)

    def test_notify_resets_baseline(self, ctx):
        trigger = StatThresholdTrigger().on_counter(keys.ITERATIONS, 3)
        ctx.stats.incr(keys.ITERATIONS, 3)
        trigger.notify_compacted(ctx)
        assert not trigger.should_compact(ctx)
        ctx.stats.incr(keys.ITERATIONS, 3)
        assert trigger.should_compact(ctx)

    def test_prefix_keys_judged_separately(self, ctx):
        trigger = StatThresholdTrigger().on_counter_prefix("input_tokens:", 100)
        ctx.stats.incr("input_tokens:a", 60)
        ctx.stats.incr("input_tokens:b", 60)
        assert not trigger.should_compact(ctx)
        ctx.stats.incr("input_tokens:b", 40)
        assert trigger.should_compact(ctx)

    def test_any_threshold_fires(self, ctx):
        trigger = StatThresholdTrigger().on_counter(keys.ITERATIONS, 10).on_counter(keys.INPUT_TOKENS, 50)
        ctx.stats.incr(keys.INPUT_TOKENS, 50)
        assert trigger.should_compact(ctx)

    def test_no_thresholds_never_fires(self, ctx):
        ctx.stats.incr(keys.ITERATIONS, 1000)
        assert not StatThresholdTrigger().should_compact(ctx)

    def test_protocol(self):
        assert isinstance(StatThresholdTrigger(), CompactionTrigger)


class TestSummarization:
    @pytest.mark.asyncio
    async def test_folds_older_iterations(self, ctx):
        items = _fill(ctx, 5)
        model = ScriptedModel("  turns 0-2 were explored  ", name="summarizer")
        await SummarizationStrategy(model, keep_recent=2).compact(ctx)

        scratchpad = ctx.data.scratchpad
        assert len(scratchpad) == 3
        assert scratchpad[0].metadata["origin"] == SUMMARY_ORIGIN
        assert text_of(scratchpad[0].messages[0]) == "turns 0-2 were explored"
        assert scratchpad[1:] == items[3:]

        prompt = text_of(model.calls[0].messages[0])
        assert "### Message 1\n\nturn 0" in prompt
        assert "turn 2" in prompt
        assert "turn 3" not in prompt
        assert "None yet." in prompt

    @pytest.mark.asyncio
    async def test_keep_recent_zero_summarizes_everything(self, ctx):
        _fill(ctx, 3)
        await SummarizationStrategy(ScriptedModel("all of it")).compact(ctx)
        assert [text_of(it.messages[0]) for it in ctx.data.scratchpad] == ["all of it"]

    @pytest.mark.asyncio
    async def test_pinned_iterations_survive(self, ctx):
        items = _fill(ctx, 5, pinned={0})
        model = ScriptedModel("summary")
        await SummarizationStrategy(model, keep_recent=1).compact(ctx)

        scratchpad = ctx.data.scratchpad
        assert scratchpad[1:] == [items[0], items[4]]
        assert "turn 0" not in text_of(model.calls[0].messages[0])

    @pytest.mark.asyncio
    async def test_previous_summary_is_replaced(self, ctx):
        _fill(ctx, 3)
        model = ScriptedModel("first summary", "second summary")
        strategy = SummarizationStrategy(model, keep_recent=1)
        await strategy.compact(ctx)
        _fill(ctx, 2)
        await strategy.compact(ctx)

        scratchpad = ctx.data.scratchpad
        summaries = [it for it in scratchpad if it.metadata.get("origin") == SUMMARY_ORIGIN]
        assert len(summaries) == 1
        assert text_of(summaries[0].messages[0]) == "second summary"
        assert "first summary" in text_of(model.calls[1].messages[0])
        assert len(scratchpad) == 2

    @pytest.mark.asyncio
    async def test_nothing_to_fold(self, ctx):
        _fill(ctx, 2)
        model = ScriptedModel("unused")
        await SummarizationStrategy(model, keep_recent=2).compact(ctx)
        assert model.calls == []
        assert len(ctx.data.scratchpad) == 2

    @pytest.mark.asyncio
    async def test_tokens_count_against_tree_limits(self, make_ctx):
        ctx = make_ctx(limits=[Limit.prefix("input_tokens:", 50)])
        _fill(ctx, 3)
        await SummarizationStrategy(ScriptedModel("s", name="summarizer", prompt_tokens=80)).compact(ctx)

        assert ctx.stats.get("input_tokens:summarizer") == 80
        assert ctx.exceeded_limit.key == "input_tokens:summarizer"
        child = ctx.children[0]
        assert child.path == "main/compaction"
        assert any(e.type == "child:completed" for e in ctx.events)

    @pytest.mark.asyncio
    async def test_custom_prompt(self, ctx):
        _fill(ctx, 2)
        model = ScriptedModel("short")
        strategy = SummarizationStrategy(model).with_prompt("Old: {summary}\nNew: {messages}").with_keep_recent(1)
        await strategy.compact(ctx)
        assert text_of(model.calls[0].messages[0]).startswith("Old: ## Summary so far")

    @pytest.mark.asyncio
    async def test_model_error_propagates(self, ctx):
        _fill(ctx, 3)
        with pytest.raises(ModelError):
            await SummarizationStrategy(FailingModel()).compact(ctx)
        assert len(ctx.data.scratchpad) == 3
        assert ctx.children[0].termination_reason is TerminationReason.ERROR

    def test_negative_keep_recent(self):
        with pytest.raises(ValueError):
            SummarizationStrategy(ScriptedModel(), keep_recent=-1)

    def test_protocol(self):
        assert isinstance(SummarizationStrategy(ScriptedModel()), CompactionStrategy)

    @pytest.mark.asyncio
    async def test_used_by_executor(self, ctx):
        model = ScriptedModel("<action>tool:search</action>")
        agent = ReactAgent(model, toolchain=MockToolChain())
        executor = Executor(
            agent,
            limits=[Limit.exact(keys.ITERATIONS, 3)],
            trigger=StatThresholdTrigger().on_counter(keys.ITERATIONS, 2),
            strategy=SummarizationStrategy(ScriptedModel("digest", name="summarizer")),
        )
        await executor.execute(ctx)

        assert text_of(ctx.data.scratchpad[0].messages[0]) == "digest"
        assert len(model.calls) == 3
        assert any("digest" in text_of(m) for m in model.calls[2].messages)
