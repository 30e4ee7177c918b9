"""Scratchpad compaction: when to trim and how."""

from .base import CompactionTrigger, CompactionStrategy
from .sliding_window import SlidingWindowStrategy
from .stat_threshold import StatThresholdTrigger
from .summarization import SummarizationStrategy, DEFAULT_SUMMARY_PROMPT, SUMMARY_ORIGIN

__all__ = [
    "CompactionTrigger", "CompactionStrategy", "SlidingWindowStrategy", "StatThresholdTrigger",
    "SummarizationStrategy", "DEFAULT_SUMMARY_PROMPT", "SUMMARY_ORIGIN",
]
