"""Decide whether an answer section ends the run."""

from .base import Termination, AnswerValidator, BaseTermination, CallableValidator
from .text import TextTermination
from .structured import JSONTermination

__all__ = [
    "Termination", "AnswerValidator", "BaseTermination", "CallableValidator",
    "TextTermination", "JSONTermination",
]
