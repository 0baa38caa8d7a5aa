"""
Regex-backed collaborators for the merged date/time extractor.

These are lightweight stand-ins for full grammar-based detectors:
- RegexCandidateSource: candidate spans from JSONL pattern files
- RegexIntegerExtractor: digit runs as integers
- RegexSuperfluousWordFilter: filler-word stripping with offset restore

Candidate pattern files hold one JSON object per line:
    {"category": "time", "pattern": "\\b\\d{1,2}\\s*(?:am|pm)\\b"}
"""

import json
import logging
import re
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Iterable

from src.merge.base import (
    CandidateSource,
    IntegerExtractor,
    RemovedMatch,
    SuperfluousWordFilter,
)
from src.merge.number_ending import merge_tokens
from src.merge.patterns import DEFAULT_FLAGS, compile_pattern
from src.merge.schemas import DateTimeSpan, SpanCategory

logger = logging.getLogger(__name__)


class RegexCandidateSource(CandidateSource):
    """
    Candidate source driven by per-category regular expressions.

    Matches of all patterns of a category are merged into non-overlapping
    spans (longest at each start wins). The reference instant is accepted
    for interface compatibility; regex detection does not resolve dates.

    Usage:
        >>> source = RegexCandidateSource({"time": [r"\\b\\d{1,2}pm\\b"]})
        >>> source.detect("time", "call at 3pm", datetime.now())[0].text
        '3pm'
    """

    def __init__(self, patterns: dict[str, Iterable[str]] | None = None):
        self._patterns: dict[str, list[re.Pattern[str]]] = defaultdict(list)
        for category, sources in (patterns or {}).items():
            for i, source in enumerate(sources):
                self.add_pattern(category, source, name=f"{category}[{i}]")

    @classmethod
    def from_directory(cls, directory: Path) -> "RegexCandidateSource":
        """
        Load candidate patterns from every JSONL file in a directory.

        Malformed lines are logged and skipped; a pattern that does not
        compile raises PatternConfigError.
        """
        source = cls()

        if not directory.exists():
            logger.warning(f"Candidates directory not found: {directory}")
            return source

        for pattern_file in sorted(directory.glob("*.jsonl")):
            with open(pattern_file, encoding="utf-8") as f:
                for line_no, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entry = json.loads(line)
                        category = entry["category"]
                        pattern = entry["pattern"]
                    except (json.JSONDecodeError, KeyError, TypeError) as e:
                        logger.warning(
                            f"Skipping {pattern_file.name}:{line_no}: {e}"
                        )
                        continue
                    source.add_pattern(
                        category, pattern, name=f"{pattern_file.name}:{line_no}"
                    )
            logger.debug(f"Loaded candidate patterns from: {pattern_file.name}")

        logger.info(
            f"Loaded {source.pattern_count} candidate patterns "
            f"for {len(source.categories)} categories"
        )
        return source

    @property
    def categories(self) -> list[str]:
        """Categories with at least one pattern."""
        return sorted(self._patterns)

    @property
    def pattern_count(self) -> int:
        return sum(len(p) for p in self._patterns.values())

    def add_pattern(
        self,
        category: SpanCategory | str,
        pattern: str,
        name: str | None = None,
    ) -> None:
        """Compile and register a pattern for a category."""
        key = category.value if isinstance(category, SpanCategory) else category
        self._patterns[key].append(
            compile_pattern(name or key, pattern, DEFAULT_FLAGS)
        )

    def detect(
        self,
        category: SpanCategory | str,
        text: str,
        reference: datetime,
    ) -> list[DateTimeSpan]:
        key = category.value if isinstance(category, SpanCategory) else category
        compiled = self._patterns.get(key)
        if not compiled or not text:
            return []

        tokens = [
            (m.start(), m.end())
            for pattern in compiled
            for m in pattern.finditer(text)
        ]
        return merge_tokens(tokens, text, key)


class RegexIntegerExtractor(IntegerExtractor):
    """Extracts runs of digits as integer spans."""

    _PATTERN = re.compile(r"\d+")

    def extract(self, text: str) -> list[DateTimeSpan]:
        return [
            DateTimeSpan(
                start=m.start(),
                length=m.end() - m.start(),
                text=m.group(0),
                category="integer",
                metadata={"value": int(m.group(0))},
            )
            for m in self._PATTERN.finditer(text)
        ]


class RegexSuperfluousWordFilter(SuperfluousWordFilter):
    """
    Removes filler words ("um", "like") before detection.

    Words are matched whole-word and case-insensitively, longer words
    first. Offsets of spans detected on
    the cleaned text are mapped back onto the original text by restore().
    """

    def __init__(self, words: Iterable[str]):
        words = sorted({w for w in words if w}, key=len, reverse=True)
        self._pattern: re.Pattern[str] | None = None
        if words:
            alternation = "|".join(re.escape(w) for w in words)
            self._pattern = compile_pattern(
                "superfluous_words", rf"\b(?:{alternation})\b"
            )

    def _find(self, text: str) -> list[RemovedMatch]:
        if self._pattern is None:
            return []

        return [
            RemovedMatch(start=m.start(), length=m.end() - m.start(), text=m.group(0))
            for m in self._pattern.finditer(text)
            if m.end() > m.start()
        ]

    def strip(self, text: str) -> tuple[str, list[RemovedMatch]]:
        removed = self._find(text)
        if not removed:
            return text, []

        parts: list[str] = []
        cursor = 0
        for match in removed:
            parts.append(text[cursor : match.start])
            cursor = match.start + match.length
        parts.append(text[cursor:])
        return "".join(parts), removed

    def restore(
        self,
        spans: list[DateTimeSpan],
        removed: list[RemovedMatch],
        original: str,
    ) -> list[DateTimeSpan]:
        restored: list[DateTimeSpan] = []

        for span in spans:
            start, length = span.start, span.length
            for match in removed:
                if match.start <= start:
                    start += match.length
                elif match.start < start + length:
                    length += match.length
            restored.append(span.resliced(original, start, length))

        return restored

