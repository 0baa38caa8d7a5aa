"""Pattern-driven span filters applied after merging."""

import re
from typing import Iterable

from src.merge.patterns import AmbiguityRule
from src.merge.schemas import DateTimeSpan


def filter_unspecific_periods(
    spans: list[DateTimeSpan],
    pattern: re.Pattern[str],
) -> list[DateTimeSpan]:
    """Drop vague period spans ("week", "month") kept only as scaffolding."""
    return [s for s in spans if not pattern.search(s.text)]


def filter_ambiguous(
    spans: list[DateTimeSpan],
    text: str,
    rules: Iterable[AmbiguityRule],
) -> list[DateTimeSpan]:
    """
    Remove spans sitting on contextually ambiguous text.

    For each rule whose trigger matches anywhere in the text, every span
    overlapping a suppression match is removed. Rules apply cumulatively.

    Args:
        spans: Current span sequence.
        text: Full source text.
        rules: Trigger/suppress pairs.

    Returns:
        Filtered sequence, order preserved.
    """
    for rule in rules:
        if not rule.trigger.search(text):
            continue

        regions = [(m.start(), m.end()) for m in rule.suppress.finditer(text)]
        if not regions:
            continue

        spans = [
            s for s in spans
            if not any(lo < s.end and hi > s.start for lo, hi in regions)
        ]

    return spans


def filter_calendar_words(
    spans: list[DateTimeSpan],
    patterns: Iterable[re.Pattern[str]],
) -> list[DateTimeSpan]:
    """Remove spans whose text hits the calendar-mode deny list."""
    patterns = tuple(patterns)
    kept = list(spans)

    # Reverse scan so removals do not shift pending indexes
    for i in range(len(kept) - 1, -1, -1):
        if any(p.search(kept[i].text) for p in patterns):
            del kept[i]

    return kept


def order_spans(spans: list[DateTimeSpan]) -> list[DateTimeSpan]:
    """Stable sort by start offset."""
    return sorted(spans, key=lambda s: s.start)
