"""Schema definitions for merged date/time spans.

Provides the DateTimeSpan dataclass shared by every pipeline stage, the
detector categories, and the arbitration outcome labels used for metrics.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SpanCategory(str, Enum):
    """Detector categories a span can be tagged with."""

    DATE = "date"
    TIME = "time"
    DATE_PERIOD = "daterange"
    DURATION = "duration"
    DATETIME = "datetime"
    TIME_PERIOD = "timerange"
    DATETIME_PERIOD = "datetimerange"
    SET = "set"
    HOLIDAY = "holiday"
    TIMEZONE = "timezone"


# Detectors run in this order; later, more composite detectors may subsume
# spans from earlier ones.
DETECTION_ORDER: tuple[SpanCategory, ...] = (
    SpanCategory.DATE,
    SpanCategory.TIME,
    SpanCategory.DATE_PERIOD,
    SpanCategory.DURATION,
    SpanCategory.DATETIME,
    SpanCategory.TIME_PERIOD,
    SpanCategory.DATETIME_PERIOD,
    SpanCategory.SET,
    SpanCategory.HOLIDAY,
)


class MergeOutcome(str, Enum):
    """Result of arbitrating a single candidate span."""

    APPENDED = "appended"
    REPLACED = "replaced"
    DROPPED = "dropped"
    SKIPPED = "skipped"
    REJECTED = "rejected"


def _category_value(category: SpanCategory | str) -> str:
    return category.value if isinstance(category, SpanCategory) else category


@dataclass
class DateTimeSpan:
    """
    A positioned, tagged substring recognized as a date/time candidate.

    Attributes:
        start: Character offset where the span starts in the source text.
        length: Number of characters covered (always positive).
        text: The covered text, equal to source[start:start + length].
        category: Detector category (a SpanCategory value for built-in tags).
        metadata: Detector-specific annotations.

    Example:
        >>> span = DateTimeSpan(start=8, length=3, text="3pm", category="time")
        >>> span.end
        11
    """

    start: int
    length: int
    text: str
    category: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.category = _category_value(self.category)

    @property
    def end(self) -> int:
        """Offset one past the last covered character."""
        return self.start + self.length

    def overlaps(self, other: "DateTimeSpan") -> bool:
        """Check if the two half-open ranges intersect."""
        return self.start < other.end and other.start < self.end

    def covers(self, other: "DateTimeSpan") -> bool:
        """Check if this span fully contains the other (equal bounds included)."""
        return self.start <= other.start and self.end >= other.end

    def is_category(self, *categories: SpanCategory | str) -> bool:
        """Check whether the span is tagged with any of the given categories."""
        return self.category in {_category_value(c) for c in categories}

    def resliced(
        self,
        source: str,
        start: int | None = None,
        length: int | None = None,
    ) -> "DateTimeSpan":
        """
        Return a copy with new bounds and text sliced from the source.

        Args:
            source: Text the span offsets refer to.
            start: New start offset (defaults to the current one).
            length: New length (defaults to the current one).

        Returns:
            New DateTimeSpan; metadata is copied, not shared.
        """
        start = self.start if start is None else start
        length = self.length if length is None else length
        return DateTimeSpan(
            start=start,
            length=length,
            text=source[start : start + length],
            category=self.category,
            metadata=dict(self.metadata),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert span to dictionary for JSON serialization."""
        return {
            "start": self.start,
            "length": self.length,
            "text": self.text,
            "category": self.category,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DateTimeSpan":
        """
        Create span from dictionary.

        Raises:
            KeyError: If required fields are missing.
        """
        return cls(
            start=data["start"],
            length=data["length"],
            text=data["text"],
            category=data["category"],
            metadata=data.get("metadata", {}),
        )
