"""Tool definitions and the toolchains that parse and run model tool calls."""

from .schema import PydanticSchema, DictSchema
from .base import define_tool, ToolRegistry, ToolChain, StructuredToolChain
from .yaml_chain import YAMLToolChain
from .json_chain import JSONToolChain

__all__ = [
    "PydanticSchema", "DictSchema", "define_tool", "ToolRegistry", "ToolChain",
    "StructuredToolChain", "YAMLToolChain", "JSONToolChain",
]
