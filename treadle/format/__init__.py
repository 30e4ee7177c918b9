"""Output formats: how sections are delimited in model text."""

from .base import TextFormat, SectionFormat
from .xml import XMLFormat
from .markdown import MarkdownFormat

__all__ = ["TextFormat", "SectionFormat", "XMLFormat", "MarkdownFormat"]
