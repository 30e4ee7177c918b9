"""Model invocation through an ExecutionContext.

Every call, whether from the agent or from a tool driving a child
context, goes through ``generate`` so token usage lands in the shared
counters and limits see it.
"""

from __future__ import annotations

import logging
import time

from .errors import AgentAbortError, ModelError, ModelStreamInterruptedError
from .execution import ExecutionContext
from .types import CompletionParams, CompletionResult, Message, Model, TokenUsage

logger = logging.getLogger(__name__)

LLM_RESPONSE_TOPIC = "llm-response"


def model_name(model: Model) -> str:
    return getattr(model, "name", "") or type(model).__name__


def supports_streaming(model: Model) -> bool:
    return callable(getattr(model, "stream", None))


async def generate(
    ctx: ExecutionContext,
    model: Model,
    messages: list[Message],
    streaming: bool = False,
    max_tokens: int = 4096,
    temperature: float = 0.7,
    stream_id: str = "",
    topic: str = LLM_RESPONSE_TOPIC,
) -> CompletionResult:
    """Call ``model`` once, publishing before/after events on ``ctx``.

    Streamed chunks are published as ``model_call:chunk`` events tagged
    with ``stream_id`` (default ``iter-<n>``) and ``topic`` as they arrive,
    then drained into a single result. Provider failures are raised as
    ``ModelError``; cancellation as ``AgentAbortError``.
    """
    ctx.raise_if_cancelled()
    name = model_name(model)
    params = CompletionParams(messages=messages, max_tokens=max_tokens, temperature=temperature)
    ctx.publish_before_model_call(name, messages)
    logger.debug("%s: calling model %s with %d messages", ctx.path, name, len(messages))

    t0 = time.monotonic()
    try:
        if streaming and supports_streaming(model):
            result = await _drain(ctx, model, params, name, stream_id or f"iter-{ctx.iteration}", topic)
        else:
            result = await model.complete(params)
    except AgentAbortError as e:
        ctx.publish_after_model_call(name, duration_ms=_ms(t0), error=e)
        raise
    except ModelError as e:
        ctx.publish_after_model_call(name, duration_ms=_ms(t0), error=e)
        raise
    except Exception as e:
        err = ModelError(name, f"model call failed: {e}", e)
        ctx.publish_after_model_call(name, duration_ms=_ms(t0), error=err)
        raise err from e

    ctx.publish_after_model_call(name, result.content, result.usage, _ms(t0))
    return result


async def _drain(
    ctx: ExecutionContext, model: Model, params: CompletionParams, name: str, stream_id: str, topic: str
) -> CompletionResult:
    text, reasoning = "", ""
    usage = TokenUsage()
    finish = "stop"
    try:
        async for chunk in model.stream(params):
            ctx.raise_if_cancelled()
            if chunk.text or chunk.reasoning:
                ctx.publish_model_chunk(name, stream_id, topic, chunk.text or "", chunk.reasoning or "")
            if chunk.text:
                text += chunk.text
            if chunk.reasoning:
                reasoning += chunk.reasoning
            if chunk.usage is not None:
                usage = chunk.usage
            if chunk.finish_reason:
                finish = chunk.finish_reason
    except AgentAbortError:
        raise
    except Exception as e:
        if text:
            raise ModelStreamInterruptedError(name, text, e) from e
        raise
    return CompletionResult(content=text, usage=usage, finish_reason=finish, reasoning=reasoning)


def _ms(t0: float) -> int:
    return int((time.monotonic() - t0) * 1000)
