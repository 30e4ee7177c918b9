"""Model invocation through an execution context."""

import pytest

from fixtures.mock_providers import FailingModel, ScriptedModel, StreamingScriptedModel
from treadle.errors import AgentAbortError, ModelError, ModelStreamInterruptedError
from treadle.events import EventBus
from treadle.execution import keys
from treadle.models import generate, model_name, supports_streaming
from treadle.types import StreamChunk, UserMessage

MESSAGES = [UserMessage(content="hello")]


class TestGenerate:
    @pytest.mark.asyncio
    async def test_complete_publishes_and_counts(self, ctx):
        model = ScriptedModel("hi there", prompt_tokens=12, completion_tokens=3)
        result = await generate(ctx, model, MESSAGES, max_tokens=256, temperature=0.1)

        assert result.content == "hi there"
        assert model.calls[0].max_tokens == 256
        assert model.calls[0].temperature == 0.1
        assert ctx.stats.get(keys.INPUT_TOKENS) == 12
        assert ctx.stats.get(keys.output_tokens_for("scripted")) == 3
        assert [e.type for e in ctx.events] == ["model_call:start", "model_call:end"]

    @pytest.mark.asyncio
    async def test_provider_failure_wrapped(self, ctx):
        with pytest.raises(ModelError) as info:
            await generate(ctx, FailingModel(), MESSAGES)

        assert info.value.model == "broken"
        assert isinstance(info.value.cause, RuntimeError)
        end = ctx.events[-1]
        assert end.error is info.value
        assert ctx.stats.get(keys.INPUT_TOKENS) == 0

    @pytest.mark.asyncio
    async def test_model_error_not_rewrapped(self, ctx):
        original = ModelError("broken", "quota exhausted")
        with pytest.raises(ModelError) as info:
            await generate(ctx, FailingModel(original), MESSAGES)
        assert info.value is original

    @pytest.mark.asyncio
    async def test_cancelled_context_never_calls(self, ctx):
        model = ScriptedModel("x")
        ctx.cancel()
        with pytest.raises(AgentAbortError):
            await generate(ctx, model, MESSAGES)
        assert model.calls == []
        assert ctx.events == []


class TestStreaming:
    @pytest.mark.asyncio
    async def test_stream_drained(self, ctx):
        model = StreamingScriptedModel("a streamed reply", chunk_size=5)
        result = await generate(ctx, model, MESSAGES, streaming=True)

        assert result.content == "a streamed reply"
        assert result.finish_reason == "stop"
        assert result.usage.completion_tokens == 5
        assert ctx.stats.get(keys.OUTPUT_TOKENS) == 5

    @pytest.mark.asyncio
    async def test_chunks_published_as_they_arrive(self, make_ctx):
        bus = EventBus()
        seen = []
        bus.on("model_call:chunk", lambda e: seen.append((e.stream_id, e.topic, e.text)))
        ctx = make_ctx(bus=bus)
        ctx.publish_before_iteration()

        model = StreamingScriptedModel("abcdefg", chunk_size=3)
        await generate(ctx, model, MESSAGES, streaming=True)

        assert seen == [("iter-1", "llm-response", "abc"), ("iter-1", "llm-response", "def"), ("iter-1", "llm-response", "g")]
        types = [e.type for e in ctx.events if e.type.startswith("model_call")]
        assert types == ["model_call:start"] + ["model_call:chunk"] * 3 + ["model_call:end"]

    @pytest.mark.asyncio
    async def test_custom_stream_id_and_topic(self, ctx):
        model = StreamingScriptedModel("xy", chunk_size=1)
        await generate(ctx, model, MESSAGES, streaming=True, stream_id="summary-3", topic="compaction")
        chunks = [e for e in ctx.events if e.type == "model_call:chunk"]
        assert {(e.stream_id, e.topic, e.model) for e in chunks} == {("summary-3", "compaction", "scripted")}

    @pytest.mark.asyncio
    async def test_reasoning_chunks_published(self, ctx):
        class Thinker:
            name = "thinker"

            async def complete(self, params):
                raise AssertionError("not used")

            async def stream(self, params):
                yield StreamChunk(reasoning="hmm")
                yield StreamChunk(text="ok", finish_reason="stop")

        result = await generate(ctx, Thinker(), MESSAGES, streaming=True)
        chunks = [(e.text, e.reasoning) for e in ctx.events if e.type == "model_call:chunk"]
        assert chunks == [("", "hmm"), ("ok", "")]
        assert result.reasoning == "hmm"

    @pytest.mark.asyncio
    async def test_streaming_off_uses_complete(self, ctx):
        model = StreamingScriptedModel("reply")
        await generate(ctx, model, MESSAGES)
        assert model.streamed == 0
        assert not any(e.type == "model_call:chunk" for e in ctx.events)

    @pytest.mark.asyncio
    async def test_interrupted_after_partial_text(self, ctx):
        model = StreamingScriptedModel("abcdefgh", chunk_size=2, fail_after=3)
        with pytest.raises(ModelStreamInterruptedError) as info:
            await generate(ctx, model, MESSAGES, streaming=True)

        assert info.value.partial_content == "abcdef"
        assert info.value.code == "MODEL_STREAM_INTERRUPTED"
        assert ctx.stats.get(keys.OUTPUT_TOKENS) == 0

    @pytest.mark.asyncio
    async def test_failure_before_any_text(self, ctx):
        model = StreamingScriptedModel("abcdefgh", fail_after=0)
        with pytest.raises(ModelError) as info:
            await generate(ctx, model, MESSAGES, streaming=True)
        assert not isinstance(info.value, ModelStreamInterruptedError)

    @pytest.mark.asyncio
    async def test_cancel_mid_stream(self, ctx):
        class CancellingModel:
            name = "cancelling"

            async def complete(self, params):
                raise AssertionError("not used")

            async def stream(self, params):
                yield StreamChunk(text="partial")
                ctx.cancel()
                yield StreamChunk(text=" more")

        with pytest.raises(AgentAbortError):
            await generate(ctx, CancellingModel(), MESSAGES, streaming=True)


class TestHelpers:
    def test_model_name(self):
        assert model_name(ScriptedModel(name="gpt")) == "gpt"

        class Anonymous:
            async def complete(self, params): ...

        assert model_name(Anonymous()) == "Anonymous"

    def test_supports_streaming(self):
        assert supports_streaming(StreamingScriptedModel())
        assert not supports_streaming(ScriptedModel())
