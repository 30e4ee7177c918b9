"""Stat key namespace.

Keys follow ``category[:qualifier]``. The unqualified key is the global
counter; the qualified form breaks it down per model, tool or validator,
which is what prefix limits match against.
"""

from __future__ import annotations

ITERATIONS = "iterations"

INPUT_TOKENS = "input_tokens"
OUTPUT_TOKENS = "output_tokens"

TOOL_CALLS = "tool_calls"
TOOL_CALLS_ERROR = "tool_calls_error"
TOOL_CALLS_ERROR_CONSECUTIVE = "tool_calls_error_consecutive"

ANSWER_REJECTED_TOTAL = "answer_rejected_total"
ANSWER_REJECTED_BY = "answer_rejected_by"

PARSE_KINDS = ("format", "toolchain", "termination", "section")

FORMAT_PARSE_ERROR_TOTAL = "format_parse_error_total"
FORMAT_PARSE_ERROR_CONSECUTIVE = "format_parse_error_consecutive"
TOOLCHAIN_PARSE_ERROR_TOTAL = "toolchain_parse_error_total"
TOOLCHAIN_PARSE_ERROR_CONSECUTIVE = "toolchain_parse_error_consecutive"
TERMINATION_PARSE_ERROR_TOTAL = "termination_parse_error_total"
TERMINATION_PARSE_ERROR_CONSECUTIVE = "termination_parse_error_consecutive"
SECTION_PARSE_ERROR_TOTAL = "section_parse_error_total"
SECTION_PARSE_ERROR_CONSECUTIVE = "section_parse_error_consecutive"


def qualified(category: str, qualifier: str) -> str:
    return f"{category}:{qualifier}"


def input_tokens_for(model: str) -> str:
    return qualified(INPUT_TOKENS, model)


def output_tokens_for(model: str) -> str:
    return qualified(OUTPUT_TOKENS, model)


def tool_calls_for(tool: str) -> str:
    return qualified(TOOL_CALLS, tool)


def tool_calls_error_for(tool: str) -> str:
    return qualified(TOOL_CALLS_ERROR, tool)


def tool_calls_error_consecutive_for(tool: str) -> str:
    return qualified(TOOL_CALLS_ERROR_CONSECUTIVE, tool)


def answer_rejected_by(validator: str) -> str:
    return qualified(ANSWER_REJECTED_BY, validator)


def parse_error_total(kind: str) -> str:
    _check_kind(kind)
    return f"{kind}_parse_error_total"


def parse_error_consecutive(kind: str) -> str:
    _check_kind(kind)
    return f"{kind}_parse_error_consecutive"


def _check_kind(kind: str) -> None:
    if kind not in PARSE_KINDS:
        raise ValueError(f"unknown parse error kind: {kind!r}")
