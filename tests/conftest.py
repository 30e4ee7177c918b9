"""
Pytest configuration and fixtures
"""

import pytest

from treadle.execution import ExecutionContext, LoopData, Task
from treadle.format import XMLFormat


@pytest.fixture
def make_ctx():
    """Factory for a root ExecutionContext around a task."""

    def _make(text: str = "What is the answer?", limits=None, **kwargs) -> ExecutionContext:
        return ExecutionContext(LoopData(Task(text=text)), limits=limits, **kwargs)

    return _make


@pytest.fixture
def ctx(make_ctx) -> ExecutionContext:
    return make_ctx()


@pytest.fixture
def xml() -> XMLFormat:
    return XMLFormat()
