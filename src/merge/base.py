"""
Collaborator interfaces consumed by the merged date/time extractor.

Detectors, the integer sub-extractor, superfluous-word handling, timezone
resolution and alternative-expression reinterpretation are supplied from
outside. Each collaborator implements one of these base classes:
- CandidateSource: per-category span detection
- IntegerExtractor: integer spans inside a short text
- SuperfluousWordFilter: strip filler words and map offsets back
- TimezoneDetector: timezone spans and ambiguity resolution
- AlternativeExpressionReinterpreter: extended-types rewrite pass
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from src.merge.schemas import DateTimeSpan, SpanCategory


@dataclass(frozen=True)
class RemovedMatch:
    """A superfluous word removed from the original text."""

    start: int
    length: int
    text: str


class CandidateSource(ABC):
    """Produces candidate spans for one detector category at a time."""

    @abstractmethod
    def detect(
        self,
        category: SpanCategory | str,
        text: str,
        reference: datetime,
    ) -> list[DateTimeSpan]:
        """
        Detect candidate spans of one category.

        Args:
            category: Detector category to run.
            text: Text to scan.
            reference: Instant relative expressions are resolved against.

        Returns:
            Spans in detector order; offsets refer to ``text``.
        """
        ...


class IntegerExtractor(ABC):
    """Finds integer numbers in a short text."""

    @abstractmethod
    def extract(self, text: str) -> list[DateTimeSpan]:
        """Return one span per integer found (empty when none)."""
        ...


class SuperfluousWordFilter(ABC):
    """Removes filler words before detection and restores offsets after."""

    @abstractmethod
    def strip(self, text: str) -> tuple[str, list[RemovedMatch]]:
        """Return the cleaned text and the removed matches in original offsets."""
        ...

    @abstractmethod
    def restore(
        self,
        spans: list[DateTimeSpan],
        removed: list[RemovedMatch],
        original: str,
    ) -> list[DateTimeSpan]:
        """Map spans over the cleaned text back onto the original text."""
        ...


class TimezoneDetector(ABC):
    """Detects timezone spans and drops ambiguous ones."""

    @abstractmethod
    def detect(self, text: str, reference: datetime) -> list[DateTimeSpan]:
        ...

    @abstractmethod
    def disambiguate(self, spans: list[DateTimeSpan]) -> list[DateTimeSpan]:
        ...


class AlternativeExpressionReinterpreter(ABC):
    """Rewrites spans into alternative date/time expressions."""

    @abstractmethod
    def apply(
        self,
        spans: list[DateTimeSpan],
        text: str,
        reference: datetime,
    ) -> list[DateTimeSpan]:
        ...
