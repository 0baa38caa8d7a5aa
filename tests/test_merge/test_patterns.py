"""Tests for pattern table construction."""

import pytest

from src.merge.patterns import (
    ENGLISH_PATTERN_SOURCES,
    MergePatterns,
    PatternConfigError,
    compile_pattern,
    english_patterns,
)


def _sources(**overrides):
    sources = dict(ENGLISH_PATTERN_SOURCES)
    sources.update(overrides)
    return sources


class TestCompilePattern:
    """Tests for single pattern compilation."""

    def test_case_insensitive_by_default(self):
        assert compile_pattern("t", r"\bfriday\b").search("FRIDAY")

    def test_invalid_pattern(self):
        with pytest.raises(PatternConfigError) as exc_info:
            compile_pattern("before", r"(?:before")

        assert exc_info.value.name == "before"
        assert "before" in str(exc_info.value)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            compile_pattern("x", "[")


class TestMergePatterns:
    """Tests for MergePatterns."""

    def test_english_tables(self):
        patterns = english_patterns()

        assert len(patterns.ambiguity_rules) == len(
            ENGLISH_PATTERN_SOURCES["ambiguity_filters"]
        )
        assert len(patterns.calendar_filters) == len(
            ENGLISH_PATTERN_SOURCES["calendar_filters"]
        )
        assert [name for name, _ in patterns.modifiers] == [
            "before",
            "after",
            "since",
            "around",
        ]

    def test_invalid_modifier_fails_at_setup(self):
        with pytest.raises(PatternConfigError) as exc_info:
            MergePatterns.compile(**_sources(around=r"(around"))

        assert exc_info.value.name == "around"

    def test_global_inline_flag_modifier_fails_at_setup(self):
        with pytest.raises(PatternConfigError) as exc_info:
            MergePatterns.compile(**_sources(after=r"(?i)\bafter"))

        assert exc_info.value.name == "after"

    def test_modifiers_anchored_at_end(self):
        patterns = english_patterns()
        anchored = dict(patterns.modifiers)

        assert anchored["after"].search("meeting after").start() == 8
        assert anchored["after"].search("after 2010 and") is None

    def test_number_ending_requires_new_time_group(self):
        with pytest.raises(PatternConfigError, match="newTime"):
            MergePatterns.compile(**_sources(number_ending=r"^\s+to\s+(\d+)$"))

    def test_ambiguity_filters_as_pairs(self):
        patterns = MergePatterns.compile(
            **_sources(ambiguity_filters=[(r"\bapril\b", r"\bapril\s+may\b")])
        )

        assert len(patterns.ambiguity_rules) == 1
        rule = patterns.ambiguity_rules[0]
        assert rule.trigger.search("April")
        assert rule.suppress.search("april may")

    def test_invalid_calendar_filter_named_by_index(self):
        with pytest.raises(PatternConfigError) as exc_info:
            MergePatterns.compile(**_sources(calendar_filters=[r"ok", r"[bad"]))

        assert exc_info.value.name == "calendar_filter[1]"

    def test_frozen(self):
        patterns = english_patterns()
        with pytest.raises(AttributeError):
            patterns.before = patterns.after


class TestEnglishPatterns:
    """Spot checks of the English tables."""

    @pytest.mark.parametrize(
        "text",
        ["from 3pm to 5pm", "from monday to friday"],
    )
    def test_from_to(self, patterns, text):
        assert patterns.from_to.search(text)

    @pytest.mark.parametrize("text", ["week", "Month", "weekend"])
    def test_unspecific_period(self, patterns, text):
        assert patterns.unspecific_date_period.search(text)

    def test_qualified_period_not_unspecific(self, patterns):
        assert not patterns.unspecific_date_period.search("next week")

    @pytest.mark.parametrize(
        "trailing, expected",
        [
            (" appointment to 4", "4"),
            (" meeting to 11.", "11"),
            (" zoom call to 9, thanks", "9"),
        ],
    )
    def test_number_ending(self, patterns, trailing, expected):
        match = patterns.number_ending.search(trailing)
        assert match.group("newTime") == expected

    @pytest.mark.parametrize("phrase", ["or later", "or after", "and after", "or above"])
    def test_year_after(self, patterns, phrase):
        assert patterns.year_after.fullmatch(phrase)
