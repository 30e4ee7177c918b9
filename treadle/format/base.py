"""TextFormat protocol and shared parse bookkeeping."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..errors import FormatParseError
from ..types import FormattedSection, OutputSection

if TYPE_CHECKING:
    from ..execution import ExecutionContext


@runtime_checkable
class TextFormat(Protocol):
    def register_section(self, section: OutputSection) -> TextFormat: ...
    def describe_structure(self) -> str: ...
    def parse(self, ctx: ExecutionContext | None, raw: str) -> dict[str, list[str]]: ...
    def format_sections(self, sections: list[FormattedSection]) -> str: ...


class SectionFormat:
    """Keeps the registered sections and publishes parse outcomes.

    Subclasses implement ``_parse`` and raise ``FormatParseError`` on
    failure; ``parse`` records the error (or resets the consecutive
    counter on success) against the given context.
    """

    def __init__(self) -> None:
        self._sections: list[OutputSection] = []
        self._known: dict[str, str] = {}  # lowercase -> registered name

    @property
    def sections(self) -> list[OutputSection]:
        return list(self._sections)

    def register_section(self, section: OutputSection) -> SectionFormat:
        lower = section.name.lower()
        if lower not in self._known:
            self._sections.append(section)
            self._known[lower] = section.name
        return self

    def parse(self, ctx: ExecutionContext | None, raw: str) -> dict[str, list[str]]:
        try:
            result = self._parse(raw)
            if not result:
                raise FormatParseError("no sections found", raw)
        except FormatParseError as e:
            if ctx is not None:
                ctx.publish_parse_error("format", raw, e)
            raise
        if ctx is not None:
            ctx.publish_parse_success("format")
        return result

    def _parse(self, raw: str) -> dict[str, list[str]]:
        raise NotImplementedError
