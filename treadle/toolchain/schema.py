"""Tool schema: Pydantic models or raw JSON Schema dicts."""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator
from pydantic import BaseModel


class PydanticSchema:
    """ToolSchema implementation backed by a Pydantic model."""

    def __init__(self, model: type[BaseModel]) -> None:
        self._model = model

    def parse(self, raw: Any) -> Any:
        if isinstance(raw, str):
            return self._model.model_validate_json(raw)
        return self._model.model_validate(raw or {})

    def to_json_schema(self) -> dict:
        return self._model.model_json_schema()


class DictSchema:
    """ToolSchema backed by a raw JSON Schema dict.

    ``parse`` returns the arguments unchanged once they validate; the first
    violation (by path) is raised as ``ValueError``.
    """

    def __init__(self, schema: dict[str, Any]) -> None:
        Draft202012Validator.check_schema(schema)
        self._schema = schema
        self._validator = Draft202012Validator(schema)

    def parse(self, raw: Any) -> Any:
        args = raw if raw is not None else {}
        errs = sorted(self._validator.iter_errors(args), key=lambda e: list(e.path))
        if errs:
            first = errs[0]
            loc = ".".join(str(p) for p in first.path) or "<root>"
            raise ValueError(f"invalid arguments at {loc}: {first.message}")
        return args

    def to_json_schema(self) -> dict:
        return self._schema


def string_properties(schema: dict[str, Any]) -> set[str]:
    """Names of top-level properties declared as ``"type": "string"``."""
    props = schema.get("properties")
    if not isinstance(props, dict):
        return set()
    return {name for name, spec in props.items() if isinstance(spec, dict) and spec.get("type") == "string"}
