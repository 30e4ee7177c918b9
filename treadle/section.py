"""Generic output sections (thinking, plans, structured notes).

A section only describes itself to the model and decodes its own
content; the format decides where it sits in the raw text.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from .errors import SectionParseError

if TYPE_CHECKING:
    from .execution import ExecutionContext

M = TypeVar("M", bound=BaseModel)


class TextSection:
    """Free-form text, returned as written."""

    def __init__(self, name: str, prompt: str = "") -> None:
        self._name = name
        self._prompt = prompt

    @property
    def name(self) -> str:
        return self._name

    def prompt(self) -> str:
        return self._prompt

    def parse_section(self, ctx: ExecutionContext | None, content: str) -> Any:
        return content


class _DecodedSection(TextSection):
    def parse_section(self, ctx: ExecutionContext | None, content: str) -> Any:
        try:
            value = self._decode(content.strip())
        except SectionParseError as e:
            if ctx is not None:
                ctx.publish_parse_error("section", content, e)
            raise
        if ctx is not None:
            ctx.publish_parse_success("section")
        return value

    def _decode(self, content: str) -> Any:
        raise NotImplementedError


class JSONSection(_DecodedSection, Generic[M]):
    """JSON content validated into a Pydantic model."""

    def __init__(self, name: str, model: type[M], prompt: str = "") -> None:
        super().__init__(name, prompt)
        self.model = model

    def prompt(self) -> str:
        schema = json.dumps(self.model.model_json_schema(), indent=2)
        head = f"{self._prompt}\n\n" if self._prompt else ""
        return f"{head}Respond with JSON matching this schema:\n{schema}"

    def _decode(self, content: str) -> M:
        try:
            return self.model.model_validate_json(content)
        except ValidationError as e:
            raise SectionParseError(f"invalid {self.name} section: {e}", content, e) from e


class YAMLSection(_DecodedSection):
    """YAML content decoded to plain Python data."""

    def _decode(self, content: str) -> Any:
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SectionParseError(f"invalid {self.name} section: {e}", content, e) from e
