"""
Modifier attachment for merged date/time spans.

Widens spans backward over an adjacent modifier ("before 2018",
"after 3pm", "since May", "around noon") and, for date periods, forward
over a trailing year qualifier ("2012 or after").

When a sentence repeats a modifier ("after 2010 and before 2018 or before
2000") each entity binds to the modifier directly in front of it: only a
match that reaches the end of the preceding text is accepted.
"""

import logging
import re

from src.merge.patterns import MergePatterns
from src.merge.schemas import DateTimeSpan, SpanCategory

logger = logging.getLogger(__name__)


def _lower_preserving_length(text: str) -> str:
    lowered = text.lower()
    # Some characters expand when lower-cased ("İ"); offsets must not drift
    return lowered if len(lowered) == len(text) else text


def find_adjacent_token(text: str, pattern: re.Pattern[str]) -> int | None:
    """
    Find a modifier match ending exactly at the end of the text.

    The leftmost start whose match reaches the end wins, so the longest
    adjacent modifier is taken ("on or before" over "before"). Matches that
    stop short of the end are ignored, which skips distant earlier modifiers.

    Args:
        text: Text preceding an entity, trailing whitespace already trimmed.
        pattern: End-anchored modifier pattern (see anchor_pattern).

    Returns:
        Start index of the match, or None.
    """
    if not text:
        return None

    match = pattern.search(text)
    return match.start() if match else None


def try_merge_modifier(
    span: DateTimeSpan,
    pattern: re.Pattern[str],
    text: str,
) -> DateTimeSpan | None:
    """
    Extend a span backward over an adjacent modifier.

    Returns:
        Widened copy of the span, or None if no modifier is adjacent.
    """
    before = _lower_preserving_length(text[: span.start])
    index = find_adjacent_token(before.rstrip(), pattern)
    if index is None:
        return None

    extra = len(before) - index
    return span.resliced(text, span.start - extra, span.length + extra)


def try_merge_year_after(
    span: DateTimeSpan,
    pattern: re.Pattern[str],
    text: str,
) -> DateTimeSpan | None:
    """
    Extend a date period forward over a trailing "or after" qualifier.

    The first match in the trimmed trailing text must start at its beginning
    and cover all of it; a longer alternative is not retried.
    """
    after = _lower_preserving_length(text[span.end :])
    stripped = after.strip()
    if not stripped:
        return None

    match = pattern.search(stripped)
    if match is None or match.start() != 0 or match.end() != len(stripped):
        return None

    leading = len(after) - len(after.lstrip())
    return span.resliced(text, span.start, span.length + leading + match.end())


def attach_modifiers(
    spans: list[DateTimeSpan],
    text: str,
    patterns: MergePatterns,
) -> list[DateTimeSpan]:
    """
    Attach adjacent modifier words to every span.

    Modifiers are tried in the order before, after, since, around; the first
    that applies wins and is recorded in ``metadata["modifier"]``.

    Args:
        spans: Current span sequence.
        text: Source text the offsets refer to.
        patterns: Pattern tables providing the modifier patterns.

    Returns:
        New sequence of (possibly widened) spans in the same order.
    """
    result: list[DateTimeSpan] = []

    for span in spans:
        for name, pattern in patterns.modifiers:
            widened = try_merge_modifier(span, pattern, text)
            if widened is not None:
                widened.metadata["modifier"] = name
                logger.debug(f"Attached '{name}' modifier: {widened.text!r}")
                span = widened
                break

        if span.is_category(SpanCategory.DATE_PERIOD):
            extended = try_merge_year_after(span, patterns.year_after, text)
            if extended is not None:
                extended.metadata["year_after"] = True
                span = extended

        result.append(span)

    return result
