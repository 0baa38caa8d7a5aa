"""Shared fixtures for merged extraction tests."""

from datetime import datetime

import pytest

from src.merge.base import CandidateSource
from src.merge.config import MergeConfig
from src.merge.patterns import MergePatterns, english_patterns
from src.merge.schemas import DateTimeSpan, SpanCategory
from src.merge.sources import RegexIntegerExtractor

REFERENCE = datetime(2024, 3, 15, 9, 30)


def make_span(
    text: str,
    fragment: str,
    category: SpanCategory | str = SpanCategory.DATE,
    occurrence: int = 0,
) -> DateTimeSpan:
    """Build a span for the n-th occurrence of a fragment in text."""
    start = -1
    for _ in range(occurrence + 1):
        start = text.index(fragment, start + 1)
    return DateTimeSpan(
        start=start,
        length=len(fragment),
        text=fragment,
        category=category,
    )


class StaticCandidateSource(CandidateSource):
    """
    Candidate source returning fixed fragments per category.

    Fragments are located in the text passed to detect(), so offsets
    follow any preprocessing. Repeated fragments map to successive
    occurrences.
    """

    def __init__(self, fragments: dict[str, list[str]]):
        self.fragments = {
            (k.value if isinstance(k, SpanCategory) else k): v
            for k, v in fragments.items()
        }
        self.calls: list[str] = []
        self.references: list[datetime] = []

    def detect(self, category, text, reference):
        key = category.value if isinstance(category, SpanCategory) else category
        self.calls.append(key)
        self.references.append(reference)

        seen: dict[str, int] = {}
        spans = []
        for fragment in self.fragments.get(key, []):
            occurrence = seen.get(fragment, 0)
            seen[fragment] = occurrence + 1
            spans.append(make_span(text, fragment, key, occurrence))
        return spans


@pytest.fixture
def patterns() -> MergePatterns:
    """Default English pattern tables."""
    return english_patterns()


@pytest.fixture
def merge_config() -> MergeConfig:
    """Default option flags."""
    return MergeConfig()


@pytest.fixture
def integer_extractor() -> RegexIntegerExtractor:
    return RegexIntegerExtractor()
