"""YAML toolchain: ``tool:`` / ``args:`` mappings, one or a list."""

from __future__ import annotations

from typing import Any

import yaml

from ..errors import ToolchainParseError
from ..types import ToolCall
from .base import StructuredToolChain
from .schema import string_properties

_PROMPT = """Call tools using YAML format:
tool: tool_name
args:
  param: value

For multiple parallel calls, use a list:
- tool: tool1
  args:
    param: value
- tool: tool2
  args:
    param: value

For strings with special characters (colons, quotes) or multiple lines, use double quotes:
- tool: send_email
  args:
    subject: "Unsubscribe Confirmation: Newsletter"
    body: "You have been unsubscribed.\\n\\nYou will no longer receive emails from us."
"""


def _dump(data: Any) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


class YAMLToolChain(StructuredToolChain):
    """Default toolchain.

    Arguments declared as strings in a tool's schema keep their literal
    YAML text, so ``zip: 01234`` stays ``"01234"`` instead of becoming an int.
    """

    syntax = "yaml"

    def prompt(self) -> str:
        return _PROMPT + "\nAvailable tools:\n" + self._describe_tools(_dump)

    def _decode(self, content: str) -> list[ToolCall]:
        content = content.strip()
        if not content:
            return []
        try:
            data = yaml.safe_load(content)
            root = yaml.compose(content)
        except yaml.YAMLError as e:
            raise ToolchainParseError(f"invalid YAML: {e}", content, e) from e

        if isinstance(data, list):
            items = list(zip(data, root.value))
        elif isinstance(data, dict):
            items = [(data, root)]
        else:
            raise ToolchainParseError("invalid YAML: expected mapping or sequence", content)
        return [self._call(item, node, content) for item, node in items]

    def _call(self, item: Any, node: yaml.Node, content: str) -> ToolCall:
        if not isinstance(item, dict):
            raise ToolchainParseError("invalid YAML: tool call must be a mapping", content)
        name = item.get("tool")
        if not name:
            raise ToolchainParseError("missing tool name", content)
        name = str(name)
        args = item.get("args") or {}
        if not isinstance(args, dict):
            raise ToolchainParseError(f"invalid YAML: args of {name} must be a mapping", content)

        tool = self.registry.get(name)
        if tool is not None and args:
            raw = _raw_scalars(node, "args")
            for prop in string_properties(tool.parameters.to_json_schema()):
                if prop in raw and not isinstance(args.get(prop), str):
                    args[prop] = raw[prop]
        return ToolCall(name=name, args=args)

    def _render_output(self, output: Any) -> str:
        if isinstance(output, str):
            return output
        if hasattr(output, "model_dump"):
            output = output.model_dump(mode="json")
        return _dump(output).rstrip("\n")


def _raw_scalars(node: yaml.Node, key: str) -> dict[str, str]:
    """Literal text of scalar values under ``node[key]``."""
    if not isinstance(node, yaml.MappingNode):
        return {}
    for k, v in node.value:
        if k.value == key and isinstance(v, yaml.MappingNode):
            return {ak.value: av.value for ak, av in v.value if isinstance(av, yaml.ScalarNode)}
    return {}
