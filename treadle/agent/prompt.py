"""System prompt assembly for the ReAct agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..format import TextFormat
from ..types import FormattedSection, Message, SystemMessage

REACT_EXPLANATION = """You solve tasks with the ReAct pattern, a loop of reasoning and acting.

Each turn:
1. Think: look at what you know so far and decide on the next step.
2. Act: call one or more of the available tools.
3. Observe: read the tool results that come back in the next message.

Keep looping until you can give a final answer.

Guidelines:
- Reason before you act.
- Get facts from tools instead of guessing.
- When a tool call fails, read the error and change your approach.
- Give the final answer only once you have what you need, and never in the same turn as a tool call."""


@dataclass
class SystemPromptContext:
    format: TextFormat
    behavior: str = ""
    critical_rules: str = ""
    output_prompt: str = ""
    tools_prompt: str = ""


SystemPromptBuilder = Callable[[SystemPromptContext], list[Message]]


def default_system_prompt_builder(ctx: SystemPromptContext) -> list[Message]:
    sections: list[FormattedSection] = []
    if ctx.behavior:
        sections.append(FormattedSection(name="behavior", content=ctx.behavior))
    sections.append(FormattedSection(name="re_act", content=REACT_EXPLANATION))
    if ctx.critical_rules:
        sections.append(FormattedSection(name="critical_rules", content=ctx.critical_rules))
    if ctx.tools_prompt:
        sections.append(FormattedSection(name="available_tools", content=ctx.tools_prompt))
    if ctx.output_prompt:
        sections.append(FormattedSection(name="output_format", content=ctx.output_prompt))
    return [SystemMessage(content=ctx.format.format_sections(sections))]
