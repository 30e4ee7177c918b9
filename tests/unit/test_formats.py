"""
Output format tests

XML and Markdown section parsing and rendering.
"""

import pytest

from treadle.errors import FormatParseError
from treadle.execution import keys
from treadle.format import MarkdownFormat, XMLFormat
from treadle.section import TextSection
from treadle.types import FormattedSection


def _xml(*names, strict=False):
    fmt = XMLFormat(strict=strict)
    for name in names:
        fmt.register_section(TextSection(name, f"{name} guidance"))
    return fmt


class TestXMLParse:
    def test_registered_sections(self):
        fmt = _xml("thinking", "action", "answer")
        parsed = fmt.parse(None, "<thinking>hmm</thinking>\n<answer> 42 </answer>")
        assert parsed == {"thinking": ["hmm"], "answer": ["42"]}

    def test_case_insensitive_tags(self):
        fmt = _xml("answer")
        assert fmt.parse(None, "<ANSWER>yes</Answer>") == {"answer": ["yes"]}

    def test_repeated_section(self):
        fmt = _xml("action")
        parsed = fmt.parse(None, "<action>a</action> and <action>b</action>")
        assert parsed == {"action": ["a", "b"]}

    def test_literal_tag_inside_other_section(self):
        """A stray <answer> inside thinking pairs with nothing"""
        fmt = _xml("thinking", "answer")
        raw = "<thinking>I will give the <answer> soon</thinking>\n<answer>done</answer>"
        parsed = fmt.parse(None, raw)
        assert parsed["thinking"] == ["I will give the <answer> soon"]
        assert parsed["answer"] == ["done"]

    def test_unregistered_tags_ignored_when_sections_registered(self):
        fmt = _xml("answer")
        assert fmt.parse(None, "<note>x</note><answer>y</answer>") == {"answer": ["y"]}

    def test_any_tag_without_registered_sections(self):
        parsed = XMLFormat().parse(None, "<Plan>step</Plan><answer>ok</answer>")
        assert parsed == {"plan": ["step"], "answer": ["ok"]}

    def test_empty_sections_dropped(self):
        fmt = _xml("action", "answer")
        assert fmt.parse(None, "<action>  </action><answer>x</answer>") == {"answer": ["x"]}

    def test_no_sections_is_parse_error(self):
        with pytest.raises(FormatParseError):
            _xml("answer").parse(None, "garbled")

    def test_strict_rejects_nested_section_tags(self):
        fmt = _xml("thinking", "answer", strict=True)
        with pytest.raises(FormatParseError, match="ambiguous"):
            fmt.parse(None, "<thinking>then <answer> it</thinking><answer>x</answer>")

    def test_strict_accepts_clean_output(self):
        fmt = _xml("thinking", "answer", strict=True)
        assert fmt.parse(None, "<thinking>a</thinking><answer>b</answer>")["answer"] == ["b"]


class TestXMLStats:
    def test_parse_error_published(self, ctx):
        fmt = _xml("answer")
        with pytest.raises(FormatParseError):
            fmt.parse(ctx, "garbled")
        assert ctx.stats.get(keys.FORMAT_PARSE_ERROR_TOTAL) == 1
        assert ctx.stats.get(keys.FORMAT_PARSE_ERROR_CONSECUTIVE) == 1
        assert ctx.events[-1].type == "parse:error"
        assert ctx.events[-1].raw_content == "garbled"

    def test_success_resets_consecutive(self, ctx):
        fmt = _xml("answer")
        with pytest.raises(FormatParseError):
            fmt.parse(ctx, "garbled")
        fmt.parse(ctx, "<answer>ok</answer>")
        assert ctx.stats.get(keys.FORMAT_PARSE_ERROR_CONSECUTIVE) == 0
        assert ctx.stats.get(keys.FORMAT_PARSE_ERROR_TOTAL) == 1


class TestXMLRender:
    def test_format_sections(self):
        out = XMLFormat().format_sections([
            FormattedSection("search", "3 results"),
            FormattedSection("book", children=[FormattedSection("status", "ok")]),
        ])
        assert out == "<search>\n3 results\n</search>\n\n<book>\n<status>\nok\n</status>\n</book>"

    def test_describe_structure_lists_sections(self):
        desc = _xml("thinking", "answer").describe_structure()
        assert "<thinking>\nthinking guidance\n</thinking>" in desc
        assert desc.index("<thinking>") < desc.index("<answer>")

    def test_register_is_idempotent(self):
        fmt = _xml("answer")
        fmt.register_section(TextSection("ANSWER"))
        assert len(fmt.sections) == 1


class TestMarkdown:
    def _md(self, *names):
        fmt = MarkdownFormat()
        for name in names:
            fmt.register_section(TextSection(name, f"{name} guidance"))
        return fmt

    def test_parse_sections(self):
        raw = "# Thinking\nlet me look\n\n# action\ntool: search\n"
        parsed = self._md("thinking", "action").parse(None, raw)
        assert parsed == {"thinking": ["let me look"], "action": ["tool: search"]}

    def test_unknown_headers_skipped(self):
        raw = "# notes\nignored\n# answer\n42"
        assert self._md("answer").parse(None, raw) == {"answer": ["42"]}

    def test_no_headers_is_error(self, ctx):
        with pytest.raises(FormatParseError):
            self._md("answer").parse(ctx, "just text")
        assert ctx.stats.get(keys.FORMAT_PARSE_ERROR_TOTAL) == 1

    def test_any_header_without_registered_sections(self):
        assert MarkdownFormat().parse(None, "# Plan\ngo") == {"Plan": ["go"]}

    def test_nested_render(self):
        out = MarkdownFormat().format_sections([
            FormattedSection("result", "top", children=[FormattedSection("detail", "deep")]),
        ])
        assert out == "# result\ntop\n## detail\ndeep"
