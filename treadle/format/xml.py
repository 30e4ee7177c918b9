"""XML-style section tags.

Example output::

    <thinking>
    I need to search for the weather...
    </thinking>

    <action>
    tool: search
    args:
      query: weather
    </action>
"""

from __future__ import annotations

import re

from ..errors import FormatParseError
from ..types import FormattedSection
from .base import SectionFormat

_ANY_SECTION = re.compile(r"<(\w+)>(.*?)</\1>", re.IGNORECASE | re.DOTALL)


class XMLFormat(SectionFormat):
    """Sections delimited by ``<name>...</name>``, matched case-insensitively.

    Each closing tag is paired with the nearest preceding unused opening
    tag, which copes with models that mention a tag literally inside
    another section (``<thinking>I'll give the <answer> next</thinking>``).
    With ``strict=True`` any registered tag found inside another section's
    content is a parse error instead.
    """

    def __init__(self, strict: bool = False) -> None:
        super().__init__()
        self.strict = strict

    def describe_structure(self) -> str:
        if not self._sections:
            return ""
        parts = ["Format your response using XML-style tags for each section:\n"]
        for section in self._sections:
            parts.append(f"<{section.name}>\n{section.prompt()}\n</{section.name}>\n")
        return "\n".join(parts)

    def format_sections(self, sections: list[FormattedSection]) -> str:
        return "\n\n".join(self._format_one(s) for s in sections)

    def _format_one(self, section: FormattedSection) -> str:
        body = [section.content] if section.content else []
        if section.children:
            body.append(self.format_sections(section.children))
        inner = "\n".join(body)
        return f"<{section.name}>\n{inner}\n</{section.name}>"

    def _parse(self, raw: str) -> dict[str, list[str]]:
        result: dict[str, list[str]] = {}
        if self._known:
            for lower, name in self._known.items():
                matches = _find_matches(raw, lower)
                if matches:
                    result[name] = matches
        else:
            for m in _ANY_SECTION.finditer(raw):
                result.setdefault(m.group(1).lower(), []).append(m.group(2).strip())

        if result and self.strict:
            self._check_ambiguity(result)
        return result

    def _check_ambiguity(self, result: dict[str, list[str]]) -> None:
        for name, contents in result.items():
            for content in contents:
                for other in self._known:
                    if other == name.lower():
                        continue
                    if re.search(rf"</?{re.escape(other)}>", content, re.IGNORECASE):
                        raise FormatParseError(
                            f"ambiguous tags: <{other}> found inside <{name}> content", content,
                        )


def _find_matches(raw: str, name: str) -> list[str]:
    tag = re.escape(name)
    closes = [m.start() for m in re.finditer(rf"</{tag}>", raw, re.IGNORECASE)]
    if not closes:
        return []
    opens = [(m.start(), m.end()) for m in re.finditer(rf"<{tag}>", raw, re.IGNORECASE)]
    used: set[int] = set()
    results = []
    for close in closes:
        best = None
        for start, end in opens:
            if end <= close and start not in used:
                best = (start, end)
        if best is None:
            continue
        used.add(best[0])
        content = raw[best[1]:close].strip()
        if content:
            results.append(content)
    return results
