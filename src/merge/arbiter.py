"""Containment-based arbitration of overlapping candidate spans.

Detector output is folded into one accumulating sequence in a fixed
priority order. A newer candidate that fully contains existing spans
replaces them in place; a candidate that partially overlaps an existing
span (or is contained by one) is dropped.
"""

import logging
import re
from collections import Counter
from typing import Iterable

from src.merge.schemas import DateTimeSpan, MergeOutcome

logger = logging.getLogger(__name__)


def clamp_to_text(span: DateTimeSpan, text: str) -> DateTimeSpan | None:
    """
    Fit a span inside the text bounds.

    Spans partly outside the text are clamped and re-sliced; spans whose
    text disagrees with the source are re-sliced.

    Returns:
        The span (or a corrected copy), or None when nothing remains.
    """
    start = max(0, span.start)
    end = min(len(text), span.end)
    if end <= start:
        logger.warning(
            f"Rejecting span outside text bounds: start={span.start} "
            f"length={span.length} text_length={len(text)}"
        )
        return None

    if start != span.start or end != span.end:
        logger.warning(
            f"Clamping span [{span.start}, {span.end}) to [{start}, {end})"
        )
        return span.resliced(text, start, end - start)

    if text[start:end] != span.text:
        return span.resliced(text)
    return span


def arbitrate(
    accumulated: list[DateTimeSpan],
    candidate: DateTimeSpan,
) -> tuple[list[DateTimeSpan], MergeOutcome]:
    """
    Merge one candidate into the accumulated sequence.

    Existing entries are scanned in sequence order. Entries the candidate
    covers are collected; the scan stops at the first overlap that is not
    covered, and such an overlap discards the candidate.

    Args:
        accumulated: Current sequence (not modified).
        candidate: Incoming span.

    Returns:
        Tuple of (new sequence, outcome).
    """
    covered: list[int] = []
    blocked = False

    for i, existing in enumerate(accumulated):
        if not existing.overlaps(candidate):
            continue
        if candidate.covers(existing):
            covered.append(i)
        else:
            blocked = True
            break

    if blocked:
        return list(accumulated), MergeOutcome.DROPPED

    if not covered:
        return [*accumulated, candidate], MergeOutcome.APPENDED

    # Insert at the first covered position to keep the order
    drop = set(covered)
    merged = [s for i, s in enumerate(accumulated) if i not in drop]
    merged.insert(covered[0], candidate)
    return merged, MergeOutcome.REPLACED


def merge_candidates(
    accumulated: list[DateTimeSpan],
    incoming: Iterable[DateTimeSpan],
    source_text: str,
    *,
    skip_from_to: bool = False,
    from_to_pattern: re.Pattern[str] | None = None,
    outcomes: Counter | None = None,
) -> list[DateTimeSpan]:
    """
    Fold detector output into the accumulated sequence.

    Args:
        accumulated: Sequence built so far (not modified).
        incoming: Spans from one detector, in detector order.
        source_text: Text the span offsets refer to.
        skip_from_to: Discard candidates matching ``from_to_pattern``.
        from_to_pattern: "from X to Y" pattern used when skipping.
        outcomes: Optional counter incremented with each MergeOutcome.

    Returns:
        New sequence with no two spans in a covered relationship.
    """
    result = list(accumulated)

    for raw in incoming:
        candidate = clamp_to_text(raw, source_text)
        if candidate is None:
            outcome = MergeOutcome.REJECTED
        elif (
            skip_from_to
            and from_to_pattern is not None
            and from_to_pattern.search(candidate.text)
        ):
            outcome = MergeOutcome.SKIPPED
        else:
            result, outcome = arbitrate(result, candidate)

        if outcomes is not None:
            outcomes[outcome] += 1

    return result
