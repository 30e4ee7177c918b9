"""ReAct agent: one reason → act → observe turn per ``step``."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from ..errors import FormatParseError, SectionParseError, ToolchainParseError
from ..execution import ExecutionContext, Iteration, LoopData
from ..format import TextFormat, XMLFormat
from ..models import generate
from ..section import TextSection
from ..termination import Termination, TextTermination
from ..toolchain import ToolChain, YAMLToolChain
from ..types import (
    AssistantMessage, ContentPart, FormattedSection, Message, Model, OutputSection,
    TerminationStatus, ToolDefinition, UserMessage,
)
from .prompt import SystemPromptBuilder, SystemPromptContext, default_system_prompt_builder

logger = logging.getLogger(__name__)

BEGIN = "BEGIN!"
CONTINUE = "CONTINUE!"


class LoopAction(str, Enum):
    CONTINUE = "continue"
    TERMINATE = "terminate"


@dataclass
class AgentLoopResult:
    action: LoopAction
    next_prompt: str = ""
    result: list[ContentPart] = field(default_factory=list)


@runtime_checkable
class AgentLoop(Protocol):
    async def step(self, ctx: ExecutionContext) -> AgentLoopResult: ...


class ReactAgent:
    """Build prompt, call model, parse, then act or answer.

    If the output has an action section the actions run and the turn
    continues, even when an answer section is present too; only an
    action-free output is offered to the termination. Format parse
    errors, per-call tool failures and rejected answers are fed back as
    the next observation. Model failures and cancellation propagate.
    """

    def __init__(
        self,
        model: Model,
        format: TextFormat | None = None,
        toolchain: ToolChain | None = None,
        termination: Termination | None = None,
        *,
        behavior: str = "",
        critical_rules: str = "",
        streaming: bool = False,
        system_prompt_builder: SystemPromptBuilder | None = None,
        observation_prefix: str = "Observation:\n",
        error_prefix: str = "Error:\n",
    ) -> None:
        self.model = model
        self.format = format or XMLFormat()
        self.toolchain = toolchain or YAMLToolChain()
        self.termination = termination or TextTermination()
        self.behavior = behavior
        self.critical_rules = critical_rules
        self.streaming = streaming
        self.system_prompt_builder = system_prompt_builder or default_system_prompt_builder
        self.observation_prefix = observation_prefix
        self.error_prefix = error_prefix
        self.thinking: OutputSection | None = None
        self.extra_sections: list[OutputSection] = []

    # -- configuration -------------------------------------------------

    def with_behavior(self, behavior: str) -> ReactAgent:
        self.behavior = behavior
        return self

    def with_critical_rules(self, rules: str) -> ReactAgent:
        self.critical_rules = rules
        return self

    def with_system_prompt_builder(self, builder: SystemPromptBuilder) -> ReactAgent:
        self.system_prompt_builder = builder
        return self

    def with_thinking(self, prompt: str | OutputSection) -> ReactAgent:
        self.thinking = TextSection("thinking", prompt) if isinstance(prompt, str) else prompt
        return self

    def with_section(self, section: OutputSection) -> ReactAgent:
        self.extra_sections.append(section)
        return self

    def with_streaming(self, enabled: bool = True) -> ReactAgent:
        self.streaming = enabled
        return self

    def register_tool(self, tool: ToolDefinition) -> ReactAgent:
        self.toolchain.register_tool(tool)
        return self

    # -- step ----------------------------------------------------------

    async def step(self, ctx: ExecutionContext) -> AgentLoopResult:
        data = ctx.data
        if data is None:
            raise ValueError("execution context has no loop data")
        if not data.task.text.strip():
            raise ValueError("task text must not be empty")
        ctx.raise_if_cancelled()

        for section in self.output_sections():
            self.format.register_section(section)
        messages = self.build_messages(data)
        response = await generate(ctx, self.model, messages, streaming=self.streaming)
        raw = response.content

        try:
            parsed = self.format.parse(ctx, raw)
        except FormatParseError as e:
            logger.debug("%s: format parse error: %s", ctx.path, e)
            return self._continue(data, raw, f"Format parse error: {e}\n\nRaw response:\n{raw}")

        notes = self._parse_extra_sections(ctx, parsed)

        actions = parsed.get(self.toolchain.name)
        if actions:
            observation = await self._run_actions(ctx, actions)
            return self._continue(data, raw, _join(notes + [observation]))

        feedback: list[FormattedSection] = []
        for content in parsed.get(self.termination.name, []):
            verdict = self.termination.should_terminate(ctx, content)
            if verdict.status is TerminationStatus.ANSWER_ACCEPTED:
                logger.debug("%s: answer accepted", ctx.path)
                data.add_history(self._iteration(raw, ""))
                return AgentLoopResult(action=LoopAction.TERMINATE, result=verdict.content)
            feedback.extend(verdict.feedback)

        if feedback:
            notes.append(self.format.format_sections(feedback))
        return self._continue(data, raw, _join(notes))

    def output_sections(self) -> list[OutputSection]:
        sections: list[OutputSection] = []
        if self.thinking is not None:
            sections.append(self.thinking)
        sections.extend(self.extra_sections)
        sections.append(self.toolchain)
        sections.append(self.termination)
        return sections

    def build_messages(self, data: LoopData) -> list[Message]:
        prompt_ctx = SystemPromptContext(
            format=self.format,
            behavior=self.behavior,
            critical_rules=self.critical_rules,
            output_prompt=self.format.describe_structure(),
            tools_prompt=self.toolchain.prompt(),
        )
        messages = list(self.system_prompt_builder(prompt_ctx))
        task = data.task
        messages.append(UserMessage(content=task.content() if task.parts else task.text))
        scratchpad = data.scratchpad
        for iteration in scratchpad:
            messages.extend(iteration.messages)
        messages.append(UserMessage(content=CONTINUE if scratchpad else BEGIN))
        return messages

    async def _run_actions(self, ctx: ExecutionContext, contents: list[str]) -> str:
        observations = []
        for content in contents:
            try:
                result = await self.toolchain.execute(ctx, content, self.format)
            except ToolchainParseError as e:
                observations.append(f"{self.error_prefix}{e}")
                continue
            if result.text:
                observations.append(f"{self.observation_prefix}{result.text}")
        return "\n\n".join(observations)

    def _parse_extra_sections(self, ctx: ExecutionContext, parsed: dict[str, list[str]]) -> list[str]:
        notes = []
        for section in self.output_sections()[:-2]:
            parse = getattr(section, "parse_section", None)
            if parse is None:
                continue
            for content in parsed.get(section.name, []):
                try:
                    parse(ctx, content)
                except SectionParseError as e:
                    notes.append(f"{self.error_prefix}{e}")
        return notes

    def _continue(self, data: LoopData, raw: str, observation: str) -> AgentLoopResult:
        iteration = self._iteration(raw, observation)
        data.add_history(iteration)
        data.add_scratchpad(iteration)
        return AgentLoopResult(action=LoopAction.CONTINUE, next_prompt=observation)

    @staticmethod
    def _iteration(raw: str, observation: str) -> Iteration:
        messages: list[Any] = [AssistantMessage(content=raw)]
        if observation:
            messages.append(UserMessage(content=observation))
        return Iteration(messages=messages)


def _join(parts: list[str]) -> str:
    return "\n\n".join(p for p in parts if p)
