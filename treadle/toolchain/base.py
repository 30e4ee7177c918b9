"""Tool registry, define_tool helper and the shared toolchain pipeline."""

from __future__ import annotations

import inspect
import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol, Type, runtime_checkable

from pydantic import BaseModel

from ..errors import AgentAbortError, ToolArgumentsError, ToolchainParseError, UnknownToolError
from ..types import (
    FormattedSection, ToolCall, ToolCallResult, ToolChainResult, ToolContext, ToolDefinition,
)
from .schema import DictSchema, PydanticSchema

if TYPE_CHECKING:
    from ..execution import ExecutionContext
    from ..format import TextFormat

logger = logging.getLogger(__name__)


def define_tool(
    name: str,
    description: str,
    parameters: Type[BaseModel] | PydanticSchema | DictSchema | dict,
    execute: Callable[..., Any | Awaitable[Any]],
) -> ToolDefinition:
    if isinstance(parameters, (PydanticSchema, DictSchema)):
        schema = parameters
    elif isinstance(parameters, dict):
        schema = DictSchema(parameters)
    else:
        schema = PydanticSchema(parameters)
    return ToolDefinition(name=name, description=description, parameters=schema, execute=execute)


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}

    def register(self, tool: ToolDefinition) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def list(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


@runtime_checkable
class ToolChain(Protocol):
    @property
    def name(self) -> str: ...
    def prompt(self) -> str: ...
    def register_tool(self, tool: ToolDefinition) -> ToolChain: ...
    async def execute(self, ctx: ExecutionContext, content: str, format: TextFormat) -> ToolChainResult: ...


class StructuredToolChain:
    """Parse calls from a section, run them and render the observation.

    Subclasses supply ``_decode`` (text to ``[ToolCall]``) and
    ``_render_output`` (tool output to text). Parse failures publish a
    ``toolchain`` parse error and raise ``ToolchainParseError``; everything
    that goes wrong with a single call is recorded in the result instead.
    """

    syntax = ""

    def __init__(self, section_name: str = "action") -> None:
        self._section_name = section_name
        self.registry = ToolRegistry()

    @property
    def name(self) -> str:
        return self._section_name

    def with_section_name(self, name: str) -> StructuredToolChain:
        self._section_name = name
        return self

    def register_tool(self, tool: ToolDefinition) -> StructuredToolChain:
        self.registry.register(tool)
        return self

    def prompt(self) -> str:
        raise NotImplementedError

    def _decode(self, content: str) -> list[ToolCall]:
        raise NotImplementedError

    def _render_output(self, output: Any) -> str:
        raise NotImplementedError

    def parse_section(self, ctx: ExecutionContext | None, content: str) -> list[ToolCall]:
        try:
            calls = self._decode(content)
        except ToolchainParseError as e:
            if ctx is not None:
                ctx.publish_parse_error("toolchain", content, e)
            raise
        if ctx is not None:
            ctx.publish_parse_success("toolchain")
        return calls

    async def execute(self, ctx: ExecutionContext, content: str, format: TextFormat) -> ToolChainResult:
        calls = self.parse_section(ctx, content)
        result = ToolChainResult(text="", calls=calls)
        sections: list[FormattedSection] = []
        for call in calls:
            ctx.raise_if_cancelled()
            output, err = await self._run(ctx, call)
            result.results.append(output)
            result.errors.append(err)
            if err is not None:
                sections.append(FormattedSection(name=call.name, content=f"Error: {err}"))
            else:
                sections.append(FormattedSection(name=call.name, content=output.text))
        result.text = format.format_sections(sections)
        return result

    async def _run(self, ctx: ExecutionContext, call: ToolCall) -> tuple[ToolCallResult | None, Exception | None]:
        tool = self.registry.get(call.name)
        if tool is None:
            err: Exception = UnknownToolError(call.name)
            ctx.publish_after_tool_call(call.name, call.args, error=err)
            return None, err

        try:
            parsed = tool.parameters.parse(call.args)
        except ValueError as e:
            err = ToolArgumentsError(call.name, str(e), e)
            ctx.publish_after_tool_call(call.name, call.args, error=err)
            return None, err

        # Subscribers may rewrite the arguments on the start event.
        args = ctx.publish_before_tool_call(call.name, parsed).args
        tool_ctx = ToolContext(execution=ctx, tool_name=call.name)
        t0 = time.monotonic()
        try:
            output = tool.execute(args, tool_ctx)
            if inspect.isawaitable(output):
                output = await output
        except AgentAbortError:
            raise
        except Exception as e:
            dur_ms = int((time.monotonic() - t0) * 1000)
            logger.debug("Tool %s failed: %s", call.name, e)
            ctx.publish_after_tool_call(call.name, args, duration_ms=dur_ms, error=e)
            return None, e
        dur_ms = int((time.monotonic() - t0) * 1000)
        ctx.publish_after_tool_call(call.name, args, output=output, duration_ms=dur_ms)
        return ToolCallResult(name=call.name, output=output, text=self._render_output(output)), None

    def _describe_tools(self, dump: Callable[[dict], str]) -> str:
        lines: list[str] = []
        for tool in self.registry.list():
            lines.append(f"\n- {tool.name}: {tool.description}")
            schema = tool.parameters.to_json_schema()
            if schema:
                lines.append("  Parameters:")
                lines.extend("    " + line for line in dump(schema).splitlines() if line)
        return "\n".join(lines)
