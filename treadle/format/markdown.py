"""Markdown header sections (``# name``)."""

from __future__ import annotations

import re

from ..types import FormattedSection
from .base import SectionFormat

_HEADER = re.compile(r"^#[ \t]+(.+?)[ \t]*$", re.MULTILINE)


class MarkdownFormat(SectionFormat):
    """Each ``# name`` header opens a section that runs to the next header.

    Headers that don't name a registered section are skipped, content and
    all. Nested FormattedSections render one heading level deeper.
    """

    def describe_structure(self) -> str:
        if not self._sections:
            return ""
        parts = ["Format your response using markdown headers for each section:\n"]
        for section in self._sections:
            parts.append(f"# {section.name}\n{section.prompt()}\n")
        return "\n".join(parts)

    def format_sections(self, sections: list[FormattedSection]) -> str:
        return self._format_at(sections, 1)

    def _format_at(self, sections: list[FormattedSection], depth: int) -> str:
        out = []
        for section in sections:
            parts = ["#" * depth + " " + section.name]
            if section.content:
                parts.append(section.content)
            if section.children:
                parts.append(self._format_at(section.children, depth + 1))
            out.append("\n".join(parts))
        return "\n\n".join(out)

    def _parse(self, raw: str) -> dict[str, list[str]]:
        result: dict[str, list[str]] = {}
        headers = list(_HEADER.finditer(raw))
        for i, m in enumerate(headers):
            name = m.group(1).strip()
            if self._known:
                name = self._known.get(name.lower())
                if name is None:
                    continue
            end = headers[i + 1].start() if i + 1 < len(headers) else len(raw)
            content = raw[m.end():end].strip()
            if content:
                result.setdefault(name, []).append(content)
        return result
