"""Output section and termination types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .messages import ContentPart


@dataclass
class FormattedSection:
    name: str
    content: str = ""
    children: list[FormattedSection] = field(default_factory=list)


@runtime_checkable
class OutputSection(Protocol):
    """A named part of the model's structured output."""

    @property
    def name(self) -> str: ...
    def prompt(self) -> str: ...


class TerminationStatus(str, Enum):
    CONTINUE = "continue"
    ANSWER_ACCEPTED = "answer_accepted"
    ANSWER_REJECTED = "answer_rejected"


@dataclass
class TerminationResult:
    status: TerminationStatus
    content: list[ContentPart] = field(default_factory=list)
    answer: Any = None
    feedback: list[FormattedSection] = field(default_factory=list)


@dataclass
class ValidationResult:
    accepted: bool
    feedback: list[FormattedSection] = field(default_factory=list)
