"""ReAct agent, system prompt builder and executor."""

from .prompt import SystemPromptContext, SystemPromptBuilder, default_system_prompt_builder, REACT_EXPLANATION
from .react import ReactAgent, AgentLoop, AgentLoopResult, LoopAction, BEGIN, CONTINUE
from .executor import Executor

__all__ = [
    "SystemPromptContext", "SystemPromptBuilder", "default_system_prompt_builder", "REACT_EXPLANATION",
    "ReactAgent", "AgentLoop", "AgentLoopResult", "LoopAction", "BEGIN", "CONTINUE",
    "Executor",
]
