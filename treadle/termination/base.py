"""Termination protocol, answer validators and the shared accept/reject flow."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ..types import ContentPart, TerminationResult, TerminationStatus, ValidationResult

if TYPE_CHECKING:
    from ..execution import ExecutionContext


@runtime_checkable
class AnswerValidator(Protocol):
    @property
    def name(self) -> str: ...
    def validate(self, ctx: ExecutionContext, answer: Any) -> ValidationResult: ...


@runtime_checkable
class Termination(Protocol):
    @property
    def name(self) -> str: ...
    def prompt(self) -> str: ...
    def parse_section(self, ctx: ExecutionContext | None, content: str) -> Any: ...
    def should_terminate(self, ctx: ExecutionContext, content: str) -> TerminationResult: ...
    def set_validator(self, validator: AnswerValidator | None) -> None: ...


class BaseTermination:
    """Runs the optional validator around a decoded answer.

    Rejections carry the validator's feedback sections; the agent renders
    them through its format and feeds them back as the observation.
    """

    def __init__(self, name: str = "answer", guidance: str = "Write your final answer here.") -> None:
        self._name = name
        self.guidance = guidance
        self.validator: AnswerValidator | None = None

    @property
    def name(self) -> str:
        return self._name

    def set_validator(self, validator: AnswerValidator | None) -> None:
        self.validator = validator

    def with_validator(self, validator: AnswerValidator | None) -> BaseTermination:
        self.set_validator(validator)
        return self

    def _judge(self, ctx: ExecutionContext, answer: Any, rendered: str) -> TerminationResult:
        if self.validator is not None:
            name = self.validator.name
            ctx.publish_validator_called(name, answer)
            verdict = self.validator.validate(ctx, answer)
            ctx.publish_validator_result(name, answer, verdict.accepted, verdict.feedback)
            if not verdict.accepted:
                return TerminationResult(
                    status=TerminationStatus.ANSWER_REJECTED,
                    answer=answer,
                    feedback=list(verdict.feedback),
                )
        return TerminationResult(
            status=TerminationStatus.ANSWER_ACCEPTED,
            content=[ContentPart(type="text", text=rendered)],
            answer=answer,
        )


class CallableValidator:
    """Adapt a plain ``(ctx, answer) -> ValidationResult`` function."""

    def __init__(self, name: str, fn) -> None:
        self._name = name
        self._fn = fn

    @property
    def name(self) -> str:
        return self._name

    def validate(self, ctx: ExecutionContext, answer: Any) -> ValidationResult:
        return self._fn(ctx, answer)
