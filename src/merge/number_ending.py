"""Trailing number absorption ("move 3pm appointment to 4").

A bare number after a time mention is usually a new time. For every time
or datetime span, the text following it is matched against the number
ending pattern; when the captured number is confirmed by the integer
extractor, a new time span is emitted for it.
"""

import logging
import re
from typing import Iterable

from src.merge.base import IntegerExtractor
from src.merge.patterns import NEW_TIME_GROUP
from src.merge.schemas import DateTimeSpan, SpanCategory

logger = logging.getLogger(__name__)


def merge_tokens(
    tokens: Iterable[tuple[int, int]],
    text: str,
    category: SpanCategory | str,
) -> list[DateTimeSpan]:
    """
    Turn (start, end) tokens into non-overlapping spans.

    Tokens are visited by start, longer first, so of two tokens sharing a
    start the longer is kept. A token inside or starting inside a kept
    token is dropped.

    Args:
        tokens: Half-open (start, end) offsets into ``text``.
        text: Source text.
        category: Category for the produced spans.

    Returns:
        Spans in start order.
    """
    kept: list[tuple[int, int]] = []

    for start, end in sorted(tokens, key=lambda t: (t[0], -(t[1] - t[0]))):
        if end <= start:
            continue
        # kept is ordered and disjoint, so only the last end matters
        if kept and start < kept[-1][1]:
            continue
        kept.append((start, end))

    return [
        DateTimeSpan(
            start=start,
            length=end - start,
            text=text[start:end],
            category=category,
        )
        for start, end in kept
    ]


def find_number_endings(
    spans: Iterable[DateTimeSpan],
    text: str,
    pattern: re.Pattern[str],
    integer_extractor: IntegerExtractor,
) -> list[DateTimeSpan]:
    """
    Emit time spans for bare numbers trailing time-like spans.

    Args:
        spans: Merged spans; only time and datetime spans are inspected.
        text: Source text.
        pattern: Number ending pattern with a ``newTime`` group, matched
            against the text following each span.
        integer_extractor: Confirms the captured token is a number.

    Returns:
        New time spans (possibly empty); existing spans are not touched.
    """
    tokens: list[tuple[int, int]] = []

    for span in spans:
        if not span.is_category(SpanCategory.TIME, SpanCategory.DATETIME):
            continue

        after = text[span.end :]
        match = pattern.search(after)
        if match is None or match.group(NEW_TIME_GROUP) is None:
            continue

        new_time = match.group(NEW_TIME_GROUP)
        if not integer_extractor.extract(new_time):
            logger.debug(f"No integer in number ending {new_time!r}, skipping")
            continue

        position = span.end + match.start(NEW_TIME_GROUP)
        tokens.append((position, position + len(new_time)))

    return merge_tokens(tokens, text, SpanCategory.TIME)
