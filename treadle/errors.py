"""Structured error hierarchy for treadle runs."""

from __future__ import annotations


class TreadleError(Exception):
    def __init__(self, code: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.cause = cause

    @classmethod
    def wrap(cls, err: Exception) -> TreadleError:
        if isinstance(err, TreadleError):
            return err
        return TreadleError("UNKNOWN", str(err), err)


class ModelError(TreadleError):
    def __init__(self, model: str, message: str, cause: Exception | None = None) -> None:
        super().__init__("MODEL_ERROR", message, cause)
        self.model = model


class ModelStreamInterruptedError(ModelError):
    def __init__(
        self, model: str, partial_content: str = "", cause: Exception | None = None
    ) -> None:
        super().__init__(model, f"Stream interrupted from {model}", cause)
        self.code = "MODEL_STREAM_INTERRUPTED"
        self.partial_content = partial_content


class ToolError(TreadleError):
    def __init__(
        self, code: str, tool_name: str, message: str, cause: Exception | None = None
    ) -> None:
        super().__init__(code, message, cause)
        self.tool_name = tool_name


class UnknownToolError(ToolError):
    def __init__(self, tool_name: str) -> None:
        super().__init__("UNKNOWN_TOOL", tool_name, f"unknown tool: {tool_name}")


class ToolArgumentsError(ToolError):
    def __init__(self, tool_name: str, message: str, cause: Exception | None = None) -> None:
        super().__init__("TOOL_INVALID_ARGS", tool_name, message, cause)


class ParseError(TreadleError):
    """Raised when model output cannot be interpreted.

    ``kind`` names the stat family that counts the failure
    (``format``, ``toolchain``, ``termination`` or ``section``).
    """

    kind = ""

    def __init__(self, message: str, raw_content: str = "", cause: Exception | None = None) -> None:
        super().__init__(f"{self.kind.upper()}_PARSE_ERROR", message, cause)
        self.raw_content = raw_content


class FormatParseError(ParseError):
    kind = "format"


class ToolchainParseError(ParseError):
    kind = "toolchain"


class TerminationParseError(ParseError):
    kind = "termination"


class SectionParseError(ParseError):
    kind = "section"


class AgentAbortError(TreadleError):
    def __init__(self) -> None:
        super().__init__("AGENT_ABORT", "Agent execution was aborted")


class ConfigError(TreadleError):
    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__("CONFIG_ERROR", message, cause)


class EventRecursionError(TreadleError):
    def __init__(self, event_type: str, max_depth: int) -> None:
        super().__init__(
            "EVENT_RECURSION", f"event {event_type!r} nested deeper than {max_depth} publishes"
        )
        self.event_type = event_type
        self.max_depth = max_depth
