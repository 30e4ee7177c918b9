"""Plain-text final answers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..types import TerminationResult, TerminationStatus
from .base import BaseTermination

if TYPE_CHECKING:
    from ..execution import ExecutionContext


class TextTermination(BaseTermination):
    """Accepts any non-empty answer section, trimmed."""

    def prompt(self) -> str:
        return self.guidance

    def parse_section(self, ctx: ExecutionContext | None, content: str) -> str:
        return content.strip()

    def should_terminate(self, ctx: ExecutionContext, content: str) -> TerminationResult:
        answer = content.strip()
        if not answer:
            return TerminationResult(status=TerminationStatus.CONTINUE)
        return self._judge(ctx, answer, answer)
