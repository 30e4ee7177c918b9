"""
treadle: a ReAct agent loop with tree-wide execution limits.

Quick start::

    from treadle import Executor, ReactAgent, define_tool, Limit

    agent = ReactAgent(model).register_tool(search_tool)
    result = await Executor(agent, limits=[Limit.exact("iterations", 10)]).run("Find flights to Oslo")
    print(result.reason, result.text)
"""

from .errors import (
    TreadleError, ModelError, ModelStreamInterruptedError, ToolError, UnknownToolError,
    ToolArgumentsError, ParseError, FormatParseError, ToolchainParseError,
    TerminationParseError, SectionParseError, AgentAbortError, ConfigError, EventRecursionError,
)
from .execution import (
    Stats, Limit, MatchMode, ExceededLimit, default_limits,
    Task, Iteration, LoopData, ExecutionContext, ExecutionResult, TerminationReason,
)
from .events import EventBus
from .format import XMLFormat, MarkdownFormat
from .toolchain import define_tool, YAMLToolChain, JSONToolChain, PydanticSchema, DictSchema
from .termination import TextTermination, JSONTermination, CallableValidator
from .section import TextSection, JSONSection, YAMLSection
from .compaction import SlidingWindowStrategy, StatThresholdTrigger, SummarizationStrategy
from .agent import ReactAgent, Executor, AgentLoopResult, LoopAction, SystemPromptContext
from .models import generate
from .config import TreadleConfig, load_config

__version__ = "0.1.0"

__all__ = [
    "TreadleError", "ModelError", "ModelStreamInterruptedError", "ToolError", "UnknownToolError",
    "ToolArgumentsError", "ParseError", "FormatParseError", "ToolchainParseError",
    "TerminationParseError", "SectionParseError", "AgentAbortError", "ConfigError", "EventRecursionError",
    "Stats", "Limit", "MatchMode", "ExceededLimit", "default_limits",
    "Task", "Iteration", "LoopData", "ExecutionContext", "ExecutionResult", "TerminationReason",
    "EventBus", "XMLFormat", "MarkdownFormat",
    "define_tool", "YAMLToolChain", "JSONToolChain", "PydanticSchema", "DictSchema",
    "TextTermination", "JSONTermination", "CallableValidator",
    "TextSection", "JSONSection", "YAMLSection",
    "SlidingWindowStrategy", "StatThresholdTrigger", "SummarizationStrategy",
    "ReactAgent", "Executor", "AgentLoopResult", "LoopAction", "SystemPromptContext",
    "generate", "TreadleConfig", "load_config",
]
