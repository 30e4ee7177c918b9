"""JSON final answers validated into a Pydantic model."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import TerminationParseError
from ..types import FormattedSection, TerminationResult, TerminationStatus
from .base import BaseTermination

if TYPE_CHECKING:
    from ..execution import ExecutionContext

M = TypeVar("M", bound=BaseModel)


class JSONTermination(BaseTermination, Generic[M]):
    """Final answer must be JSON matching ``model``.

    An answer that fails to decode is a ``termination`` parse error: the
    step continues and the error goes back to the model as feedback.
    Accepted answers are re-serialized, so the result text is canonical JSON.
    """

    def __init__(
        self,
        model: type[M],
        name: str = "answer",
        guidance: str = "Write your final answer here.",
        example: M | None = None,
    ) -> None:
        super().__init__(name, guidance)
        self.model = model
        self.example = example

    def with_example(self, example: M) -> JSONTermination[M]:
        self.example = example
        return self

    def prompt(self) -> str:
        parts = []
        if self.guidance:
            parts.append(self.guidance + "\n\n")
        parts.append("Respond with valid JSON matching this schema:\n")
        parts.append(json.dumps(self.model.model_json_schema(), indent=2))
        if self.example is not None:
            parts.append("\n\nExample:\n")
            parts.append(self.example.model_dump_json(indent=2))
        return "".join(parts)

    def parse_section(self, ctx: ExecutionContext | None, content: str) -> M | None:
        content = content.strip()
        if not content:
            return None
        try:
            answer = self.model.model_validate_json(content)
        except ValidationError as e:
            err = TerminationParseError(f"invalid JSON answer: {e}", content, e)
            if ctx is not None:
                ctx.publish_parse_error("termination", content, err)
            raise err from e
        if ctx is not None:
            ctx.publish_parse_success("termination")
        return answer

    def should_terminate(self, ctx: ExecutionContext, content: str) -> TerminationResult:
        try:
            answer = self.parse_section(ctx, content)
        except TerminationParseError as e:
            return TerminationResult(
                status=TerminationStatus.CONTINUE,
                feedback=[FormattedSection(name="error", content=str(e))],
            )
        if answer is None:
            return TerminationResult(status=TerminationStatus.CONTINUE)
        return self._judge(ctx, answer, answer.model_dump_json())
