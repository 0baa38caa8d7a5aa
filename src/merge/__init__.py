"""
Merged date/time extraction.

This module merges candidate spans from independent per-category
date/time detectors into one ordered, non-redundant span list, then
refines it with ambiguity filtering, modifier attachment and trailing
number absorption.

Components:
- MergeConfig: Option flags for the extractor
- MergePatterns: Locale pattern tables (english_patterns() by default)
- DateTimeSpan: Dataclass representing a recognized span
- MergedDateTimeExtractor: Main service running the pipeline
- RegexCandidateSource: JSONL-driven regex detector backend
"""

from src.merge.config import MergeConfig
from src.merge.patterns import MergePatterns, PatternConfigError, english_patterns
from src.merge.schemas import DETECTION_ORDER, DateTimeSpan, MergeOutcome, SpanCategory
from src.merge.service import MergedDateTimeExtractor
from src.merge.sources import (
    RegexCandidateSource,
    RegexIntegerExtractor,
    RegexSuperfluousWordFilter,
)

__all__ = [
    "DETECTION_ORDER",
    "DateTimeSpan",
    "MergeConfig",
    "MergeOutcome",
    "MergePatterns",
    "MergedDateTimeExtractor",
    "PatternConfigError",
    "RegexCandidateSource",
    "RegexIntegerExtractor",
    "RegexSuperfluousWordFilter",
    "SpanCategory",
    "english_patterns",
]
