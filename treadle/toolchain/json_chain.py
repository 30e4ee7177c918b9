"""JSON toolchain: ``{"tool": ..., "args": {...}}`` objects, one or a list."""

from __future__ import annotations

import json
from typing import Any

from ..errors import ToolchainParseError
from ..types import ToolCall
from .base import StructuredToolChain

_PROMPT = """Call tools using JSON format:
{"tool": "tool_name", "args": {"param": "value"}}

For multiple parallel calls, use an array:
[{"tool": "tool1", "args": {...}}, {"tool": "tool2", "args": {...}}]
"""


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


class JSONToolChain(StructuredToolChain):
    syntax = "json"

    def prompt(self) -> str:
        return _PROMPT + "\nAvailable tools:\n" + self._describe_tools(_dump)

    def _decode(self, content: str) -> list[ToolCall]:
        content = content.strip()
        if not content:
            return []
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ToolchainParseError(f"invalid JSON: {e}", content, e) from e

        items = data if isinstance(data, list) else [data]
        calls = []
        for item in items:
            if not isinstance(item, dict):
                raise ToolchainParseError("invalid JSON: tool call must be an object", content)
            name = item.get("tool")
            if not name:
                raise ToolchainParseError("missing tool name", content)
            args = item.get("args") or {}
            if not isinstance(args, dict):
                raise ToolchainParseError(f"invalid JSON: args of {name} must be an object", content)
            calls.append(ToolCall(name=str(name), args=args))
        return calls

    def _render_output(self, output: Any) -> str:
        if isinstance(output, str):
            return output
        if hasattr(output, "model_dump"):
            output = output.model_dump(mode="json")
        return json.dumps(output, ensure_ascii=False, default=str)
