"""
Merged date/time extraction service.

Runs every category detector over the text in a fixed priority order,
folds their candidates into one non-redundant sequence, and refines it.

Architecture:
- Candidate source built lazily from JSONL pattern files unless injected
- Containment arbitration in detector order (date -> ... -> holiday)
- Optional timezone pass and superfluous-word stripping (preview mode)
- Trailing number absorption, then the optional reinterpretation pass
- Period, ambiguity and (calendar mode) deny-list filters
- Modifier attachment and final ordering by start offset
"""

import time
from collections import Counter
from datetime import datetime

import structlog

from src.merge.arbiter import clamp_to_text, merge_candidates
from src.merge.base import (
    AlternativeExpressionReinterpreter,
    CandidateSource,
    IntegerExtractor,
    RemovedMatch,
    SuperfluousWordFilter,
    TimezoneDetector,
)
from src.merge.config import MergeConfig
from src.merge.filters import (
    filter_ambiguous,
    filter_calendar_words,
    filter_unspecific_periods,
    order_spans,
)
from src.merge.modifiers import attach_modifiers
from src.merge.number_ending import find_number_endings
from src.merge.patterns import MergePatterns, english_patterns
from src.merge.schemas import DETECTION_ORDER, DateTimeSpan, SpanCategory
from src.merge.sources import RegexCandidateSource, RegexIntegerExtractor
from src.observability.metrics import MetricsCollector, get_metrics

logger = structlog.get_logger(__name__)


class MergedDateTimeExtractor:
    """
    Merges per-category date/time candidates into one ordered span list.

    Usage:
        >>> extractor = MergedDateTimeExtractor()
        >>> for span in extractor.extract("meeting after 3pm on friday"):
        ...     print(span.category, span.text)
        time after 3pm
        date friday

    Note:
        The default candidate source is loaded on first extract() call.
        Collaborators that only matter in preview or extended-types mode
        are optional; the corresponding stage is skipped when absent.
    """

    def __init__(
        self,
        config: MergeConfig | None = None,
        patterns: MergePatterns | None = None,
        candidate_source: CandidateSource | None = None,
        integer_extractor: IntegerExtractor | None = None,
        superfluous_filter: SuperfluousWordFilter | None = None,
        timezone_detector: TimezoneDetector | None = None,
        alt_reinterpreter: AlternativeExpressionReinterpreter | None = None,
    ):
        """
        Initialize the extractor.

        Args:
            config: Option flags. If None, uses default (environment) config.
            patterns: Locale pattern tables. If None, uses English tables.
            candidate_source: Detector backend. If None, a RegexCandidateSource
                is loaded from config.candidates_dir on first use.
            integer_extractor: Confirms trailing numbers. Defaults to digits.
            superfluous_filter: Filler-word handling for preview mode.
            timezone_detector: Timezone detection for preview mode.
            alt_reinterpreter: Rewrite pass for extended-types mode.
        """
        self.config = config or MergeConfig()
        self.patterns = patterns or english_patterns()
        self._candidate_source = candidate_source
        self._integer_extractor = integer_extractor or RegexIntegerExtractor()
        self._superfluous_filter = superfluous_filter
        self._timezone_detector = timezone_detector
        self._alt_reinterpreter = alt_reinterpreter

    @property
    def candidate_source(self) -> CandidateSource:
        """Candidate source, loading the default one on first access."""
        if self._candidate_source is None:
            logger.info(
                "Loading candidate patterns",
                candidates_dir=str(self.config.candidates_dir),
            )
            self._candidate_source = RegexCandidateSource.from_directory(
                self.config.candidates_dir
            )
        return self._candidate_source

    def extract(
        self,
        text: str,
        reference: datetime | None = None,
    ) -> list[DateTimeSpan]:
        """
        Extract merged date/time spans from text.

        Args:
            text: Text to extract from.
            reference: Instant relative expressions are resolved against.
                Defaults to now.

        Returns:
            Spans ordered by start offset, none contained in another,
            with offsets into ``text``.
        """
        metrics = get_metrics()

        if not text or not text.strip():
            metrics.record_extraction("empty")
            return []

        reference = reference or datetime.now()
        started = time.perf_counter()

        try:
            spans = self._run(text, reference, metrics)
        except Exception:
            metrics.record_extraction("error")
            logger.exception("Date/time extraction failed", text_length=len(text))
            raise

        metrics.record_stage_latency("total", time.perf_counter() - started)
        metrics.record_extraction("success" if spans else "empty", len(spans))
        logger.debug(
            "Extracted date/time spans",
            count=len(spans),
            spans=[s.text for s in spans],
        )
        return spans

    def extract_batch(
        self,
        texts: list[str],
        reference: datetime | None = None,
    ) -> list[list[DateTimeSpan]]:
        """
        Extract spans from several texts with a shared reference instant.

        Returns:
            List of span lists, one per input text.
        """
        reference = reference or datetime.now()
        return [self.extract(text, reference) for text in texts]

    def _run(
        self,
        text: str,
        reference: datetime,
        metrics: MetricsCollector,
    ) -> list[DateTimeSpan]:
        original = text
        removed: list[RemovedMatch] = []

        if self.config.enable_preview:
            if self._superfluous_filter is not None:
                text, removed = self._superfluous_filter.strip(text)
            else:
                logger.debug("No superfluous word filter configured, skipping")

        started = time.perf_counter()
        spans = self._detect(text, reference, metrics)
        metrics.record_stage_latency("detect", time.perf_counter() - started)

        started = time.perf_counter()
        spans = self._refine(spans, text, metrics)
        metrics.record_stage_latency("refine", time.perf_counter() - started)

        if removed:
            spans = self._superfluous_filter.restore(spans, removed, original)
            spans = self._within_bounds(spans, original)

        return spans

    def _merge(
        self,
        accumulated: list[DateTimeSpan],
        incoming: list[DateTimeSpan],
        text: str,
        label: SpanCategory | str,
        metrics: MetricsCollector,
    ) -> list[DateTimeSpan]:
        outcomes: Counter = Counter()
        merged = merge_candidates(
            accumulated,
            incoming,
            text,
            skip_from_to=self.config.skip_from_to_merge,
            from_to_pattern=self.patterns.from_to,
            outcomes=outcomes,
        )
        metrics.record_outcomes(label, outcomes)
        return merged

    def _detect(
        self,
        text: str,
        reference: datetime,
        metrics: MetricsCollector,
    ) -> list[DateTimeSpan]:
        """Run detectors in priority order and arbitrate their output."""
        spans: list[DateTimeSpan] = []
        source = self.candidate_source

        # Order matters: later detectors may subsume earlier spans
        for category in DETECTION_ORDER:
            candidates = source.detect(category, text, reference)
            spans = self._merge(spans, candidates, text, category, metrics)

        if self.config.enable_preview:
            if self._timezone_detector is not None:
                candidates = self._timezone_detector.detect(text, reference)
                spans = self._merge(
                    spans, candidates, text, SpanCategory.TIMEZONE, metrics
                )
                spans = self._within_bounds(
                    self._timezone_detector.disambiguate(spans), text
                )
            else:
                logger.debug("No timezone detector configured, skipping")

        # Needs the merged time spans, so it runs after every detector
        endings = find_number_endings(
            spans, text, self.patterns.number_ending, self._integer_extractor
        )
        spans = self._merge(spans, endings, text, "number_ending", metrics)

        if self.config.extended_types:
            if self._alt_reinterpreter is not None:
                spans = self._within_bounds(
                    self._alt_reinterpreter.apply(spans, text, reference), text
                )
            else:
                logger.debug("No alternative expression reinterpreter, skipping")

        return spans

    def _refine(
        self,
        spans: list[DateTimeSpan],
        text: str,
        metrics: MetricsCollector,
    ) -> list[DateTimeSpan]:
        """Filter, attach modifiers and order the merged spans."""
        before = len(spans)
        spans = filter_unspecific_periods(spans, self.patterns.unspecific_date_period)
        metrics.record_filtered("unspecific_period", before - len(spans))

        before = len(spans)
        spans = filter_ambiguous(spans, text, self.patterns.ambiguity_rules)
        metrics.record_filtered("ambiguity", before - len(spans))

        spans = attach_modifiers(spans, text, self.patterns)

        if self.config.calendar_mode:
            before = len(spans)
            spans = filter_calendar_words(spans, self.patterns.calendar_filters)
            metrics.record_filtered("calendar", before - len(spans))

        return order_spans(spans)

    @staticmethod
    def _within_bounds(spans: list[DateTimeSpan], text: str) -> list[DateTimeSpan]:
        """Clamp collaborator output to the text, dropping empty spans."""
        checked = (clamp_to_text(span, text) for span in spans)
        return [span for span in checked if span is not None]
