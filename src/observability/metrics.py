"""
Prometheus metrics for monitoring the merged date/time extractor.

Defines and exposes metrics for:
- Extraction requests and latency
- Candidate arbitration outcomes per detector category
- Spans removed by each refinement stage

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging
from collections import Counter as OutcomeCounter
from enum import Enum

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the extraction pipeline.

    Usage:
        metrics = MetricsCollector()
        metrics.start_server()

        metrics.extractions.labels(status="success").inc()
        metrics.extraction_latency.labels(stage="merge").observe(0.002)
    """

    def __init__(self):
        """Initialize Prometheus metrics."""

        self.extractions = Counter(
            "datetime_merger_extractions_total",
            "Total number of extraction requests",
            ["status"],  # status: success, empty, error
        )

        self.candidates = Counter(
            "datetime_merger_candidates_total",
            "Candidate spans by detector category and arbitration outcome",
            ["category", "outcome"],
        )

        self.spans_filtered = Counter(
            "datetime_merger_spans_filtered_total",
            "Spans removed by a refinement stage",
            ["stage"],  # unspecific_period, ambiguity, calendar
        )

        self.spans_emitted = Histogram(
            "datetime_merger_spans_emitted",
            "Number of spans returned per extraction",
            buckets=(0, 1, 2, 3, 5, 10, 20, 50),
        )

        self.extraction_latency = Histogram(
            "datetime_merger_extraction_latency_seconds",
            "Time spent in extraction pipeline stages",
            ["stage"],  # detect, refine, total
            buckets=LATENCY_BUCKETS,
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    # Convenience methods

    def record_outcomes(
        self,
        category: Enum | str,
        outcomes: OutcomeCounter,
    ) -> None:
        """
        Record arbitration outcomes for one detector category.

        Args:
            category: Detector category the candidates came from
            outcomes: Counts keyed by MergeOutcome
        """
        category_str = category.value if isinstance(category, Enum) else category
        for outcome, count in outcomes.items():
            if not count:
                continue
            outcome_str = outcome.value if isinstance(outcome, Enum) else outcome
            self.candidates.labels(category=category_str, outcome=outcome_str).inc(count)

    def record_filtered(self, stage: str, count: int) -> None:
        """Record spans removed by a refinement stage."""
        if count > 0:
            self.spans_filtered.labels(stage=stage).inc(count)

    def record_stage_latency(self, stage: str, latency: float) -> None:
        """Record pipeline stage latency in seconds."""
        self.extraction_latency.labels(stage=stage).observe(latency)

    def record_extraction(self, status: str, span_count: int = 0) -> None:
        """Record a finished extraction request."""
        self.extractions.labels(status=status).inc()
        if status != "error":
            self.spans_emitted.observe(span_count)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
