"""Pattern tables driving the merge refinement passes.

All locale-dependent behavior of the merged extractor (modifier words,
ambiguity rules, calendar deny list, number endings) lives in a
MergePatterns instance injected at construction. Patterns are compiled
once; a pattern that fails to compile is a setup-time error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping, NamedTuple, Sequence

NEW_TIME_GROUP = "newTime"

DEFAULT_FLAGS = re.IGNORECASE | re.DOTALL


class PatternConfigError(ValueError):
    """Raised when a configured pattern cannot be used."""

    def __init__(self, name: str, message: str):
        self.name = name
        super().__init__(f"Invalid pattern '{name}': {message}")


class AmbiguityRule(NamedTuple):
    """Trigger tested against the whole text, suppression matched against spans."""

    trigger: re.Pattern[str]
    suppress: re.Pattern[str]


def compile_pattern(name: str, pattern: str, flags: int = DEFAULT_FLAGS) -> re.Pattern[str]:
    """
    Compile a single configured pattern.

    Args:
        name: Name used in the error message.
        pattern: Regular expression source.
        flags: Compilation flags.

    Returns:
        Compiled pattern.

    Raises:
        PatternConfigError: If the pattern does not compile.
    """
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise PatternConfigError(name, str(e)) from e


def anchor_pattern(name: str, pattern: re.Pattern[str]) -> re.Pattern[str]:
    """
    Compile a variant of a pattern that only matches at the end of the text.

    Raises:
        PatternConfigError: If the wrapped pattern does not compile, e.g.
            when the source uses a global inline flag such as ``(?i)``.
    """
    return compile_pattern(name, rf"(?:{pattern.pattern})\Z", pattern.flags)


@dataclass(frozen=True)
class MergePatterns:
    """
    Compiled pattern tables for one locale.

    Attributes:
        from_to: Matches "from X to Y" candidates skipped in skip-from-to mode.
        unspecific_date_period: Matches vague period spans to drop.
        ambiguity_rules: Trigger/suppress pairs.
        calendar_filters: Deny list applied in calendar mode.
        number_ending: Matches "... appointment to 4" after a time span;
            must define a ``newTime`` group.
        before: Modifier preceding an entity ("before", "prior to").
        after: Modifier preceding an entity ("after", "later than").
        since: Modifier preceding an entity ("since", "starting from").
        around: Modifier preceding an entity ("around", "circa").
        year_after: Trailing qualifier after a date period ("or after").
        anchored: End-anchored modifier patterns keyed by modifier name,
            built at construction.
    """

    from_to: re.Pattern[str]
    unspecific_date_period: re.Pattern[str]
    ambiguity_rules: tuple[AmbiguityRule, ...]
    calendar_filters: tuple[re.Pattern[str], ...]
    number_ending: re.Pattern[str]
    before: re.Pattern[str]
    after: re.Pattern[str]
    since: re.Pattern[str]
    around: re.Pattern[str]
    year_after: re.Pattern[str]
    anchored: dict[str, re.Pattern[str]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if NEW_TIME_GROUP not in self.number_ending.groupindex:
            raise PatternConfigError(
                "number_ending", f"missing named group '{NEW_TIME_GROUP}'"
            )

        anchored = {
            name: anchor_pattern(name, pattern)
            for name, pattern in (
                ("before", self.before),
                ("after", self.after),
                ("since", self.since),
                ("around", self.around),
            )
        }
        object.__setattr__(self, "anchored", anchored)

    @property
    def modifiers(self) -> tuple[tuple[str, re.Pattern[str]], ...]:
        """End-anchored modifier patterns in the order they are tried."""
        return tuple(self.anchored.items())

    @classmethod
    def compile(
        cls,
        *,
        from_to: str,
        unspecific_date_period: str,
        ambiguity_filters: Mapping[str, str] | Sequence[tuple[str, str]],
        calendar_filters: Sequence[str],
        number_ending: str,
        before: str,
        after: str,
        since: str,
        around: str,
        year_after: str,
    ) -> "MergePatterns":
        """
        Build pattern tables from regular expression strings.

        Raises:
            PatternConfigError: If any pattern fails to compile or the number
                ending pattern has no ``newTime`` group.
        """
        pairs = (
            ambiguity_filters.items()
            if isinstance(ambiguity_filters, Mapping)
            else ambiguity_filters
        )
        rules = tuple(
            AmbiguityRule(
                trigger=compile_pattern(f"ambiguity_trigger[{i}]", trigger),
                suppress=compile_pattern(f"ambiguity_suppress[{i}]", suppress),
            )
            for i, (trigger, suppress) in enumerate(pairs)
        )
        return cls(
            from_to=compile_pattern("from_to", from_to),
            unspecific_date_period=compile_pattern(
                "unspecific_date_period", unspecific_date_period
            ),
            ambiguity_rules=rules,
            calendar_filters=tuple(
                compile_pattern(f"calendar_filter[{i}]", p)
                for i, p in enumerate(calendar_filters)
            ),
            number_ending=compile_pattern("number_ending", number_ending),
            before=compile_pattern("before", before),
            after=compile_pattern("after", after),
            since=compile_pattern("since", since),
            around=compile_pattern("around", around),
            year_after=compile_pattern("year_after", year_after),
        )


# English tables
_INCLUSIVE = r"(?:(?:on|in|at)\s+or\s+)?"
_HOUR = (
    r"(?:[01]?\d|2[0-3]|zero|one|two|three|four|five|six|seven|eight|nine"
    r"|ten|eleven|twelve)"
)

ENGLISH_PATTERN_SOURCES: dict[str, object] = {
    "from_to": r"\b(?:from)\b.+\b(?:to)\b.+",
    "unspecific_date_period": r"^(?:week|weekend|fortnight|month|year)$",
    "ambiguity_filters": {
        r"\bmay\b": (
            r"\b(?:(?:^|[!.?,;]\s*)may\s+i|(?:i|you|he|she|we|they)\s+may"
            r"|may\s+(?:(?:also|not|well)\s+)?(?:be|ask|contain|take|have|get|work|reply|differ))\b"
        ),
        r"\bgood\s+(?:morning|afternoon|evening|night|day)\b": (
            r"\bgood\s+(?:morning|afternoon|evening|night|day)\b"
        ),
        r"\b(?:a|one)\s+second\b": r"\b(?:a|one)\s+second\s+(?:round|time|opinion)\b",
    },
    "calendar_filters": [
        r"\bblackjack\b",
        r"\b(?:this|next|last)\s+week'?s\s+episode\b",
        r"\bone\s+on\s+one\b",
    ],
    "number_ending": (
        r"^(?:\s+(?P<meeting>meeting|appointment|conference"
        r"|(?:(?:skype|teams|zoom|facetime)\s+)?call)\s+to\s+"
        rf"(?P<{NEW_TIME_GROUP}>{_HOUR})(?:\.?$|(?:\.,|,|!|\?)))"
    ),
    "before": (
        rf"\b{_INCLUSIVE}(?:before|in\s+advance\s+of|prior\s+to"
        r"|(?:no\s+later|earlier|sooner)\s+than|ending\s+(?:with|on)|by"
        r"|(?:up\s+)?until|till|as\s+late\s+as)(?:\s+the)?"
    ),
    "after": (
        rf"\b{_INCLUSIVE}(?:after(?!\s+or\s+equal\s+to)|(?:no\s+earlier|later)\s+than"
        r"|as\s+early\s+as)(?:\s+the)?"
    ),
    "since": (
        r"\b(?:since|after\s+or\s+equal\s+to|starting\s+(?:from|on|with)"
        r"|(?:any\s*time\s+)?from)(?:\s+the)?"
    ),
    "around": r"\b(?:around|circa|approximately|about)(?:\s+the)?",
    "year_after": r"(?:or\s+(?:above|after|later|greater)|and\s+(?:later|after))\b",
}


def english_patterns() -> MergePatterns:
    """Build the default English pattern tables."""
    return MergePatterns.compile(**ENGLISH_PATTERN_SOURCES)  # type: ignore[arg-type]
