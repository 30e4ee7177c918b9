"""Conversation state carried across iterations of one run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..types import ContentPart, Message

# Iterations scored at or above this survive compaction.
PINNED = 1.0


@dataclass(frozen=True)
class Task:
    text: str
    parts: tuple[ContentPart, ...] = ()

    def content(self) -> list[ContentPart]:
        return [ContentPart(type="text", text=self.text), *self.parts]


@dataclass
class Iteration:
    """One finished turn: the assistant response and an optional observation."""

    messages: list[Message] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def importance(self) -> float:
        return float(self.metadata.get("importance", 0.0))

    def pin(self) -> None:
        self.metadata["importance"] = PINNED

    @property
    def pinned(self) -> bool:
        return self.importance >= PINNED


class LoopData:
    """Task, full history and the scratchpad replayed into the next prompt.

    History is append-only. The scratchpad may be replaced wholesale, which
    is how compaction trims it.
    """

    def __init__(self, task: Task) -> None:
        self.task = task
        self._history: list[Iteration] = []
        self._scratchpad: list[Iteration] = []

    @property
    def history(self) -> list[Iteration]:
        return list(self._history)

    @property
    def scratchpad(self) -> list[Iteration]:
        return list(self._scratchpad)

    def add_history(self, iteration: Iteration) -> None:
        self._history.append(iteration)

    def add_scratchpad(self, iteration: Iteration) -> None:
        self._scratchpad.append(iteration)

    def set_scratchpad(self, iterations: list[Iteration]) -> None:
        self._scratchpad = list(iterations)
