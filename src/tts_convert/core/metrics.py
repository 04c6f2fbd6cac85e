"""
Prometheus Metrics for tts-convert.

Metrics:
    tts_convert_requests_total{outcome}        Conversions by final state
                                               (delivered, rejected, failed, send_failed)
    tts_convert_request_duration_seconds       End-to-end handler latency
    tts_convert_provider_duration_seconds{status}  Provider round-trip latency
    tts_convert_provider_errors_total{kind}    Failures split by provider/storage
    tts_convert_audio_bytes_total              Bytes written to artifacts

Usage:
    from tts_convert.core.metrics import metrics

    metrics.record_outcome("delivered", duration=1.2)
    content, content_type = metrics.get_metrics_response()

The metrics use a private CollectorRegistry so that several app instances
(e.g. in tests) never clash with the default global registry.
"""
from __future__ import annotations

from typing import Optional

# Service keeps running without prometheus_client; metric calls become no-ops
try:
    from prometheus_client import (
        CONTENT_TYPE_LATEST,
        CollectorRegistry,
        Counter,
        Histogram,
        generate_latest,
    )
    PROMETHEUS_AVAILABLE = True
except ImportError:
    PROMETHEUS_AVAILABLE = False
    CollectorRegistry = None


OUTCOMES = ("delivered", "rejected", "failed", "send_failed")


class ConvertMetrics:
    """
    Metric collector for the conversion pipeline.

    Attributes:
        enabled: Whether metrics collection is active.
    """

    def __init__(self):
        self._enabled = PROMETHEUS_AVAILABLE
        self._registry: Optional["CollectorRegistry"] = None

        if self._enabled:
            self._setup_metrics()

    def _setup_metrics(self) -> None:
        self._registry = CollectorRegistry()

        self._requests_total = Counter(
            "tts_convert_requests_total",
            "Conversion requests by outcome",
            ["outcome"],
            registry=self._registry,
        )
        self._request_duration = Histogram(
            "tts_convert_request_duration_seconds",
            "Conversion handler duration in seconds",
            buckets=(0.05, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )
        self._provider_duration = Histogram(
            "tts_convert_provider_duration_seconds",
            "Speech provider round-trip in seconds",
            ["status"],
            buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )
        self._errors_total = Counter(
            "tts_convert_provider_errors_total",
            "Synthesis failures by kind",
            ["kind"],
            registry=self._registry,
        )
        self._audio_bytes_total = Counter(
            "tts_convert_audio_bytes_total",
            "Total audio bytes written to artifacts",
            registry=self._registry,
        )

    @property
    def enabled(self) -> bool:
        """Whether metrics collection is enabled."""
        return self._enabled

    def record_outcome(self, outcome: str, duration: Optional[float] = None) -> None:
        """
        Record the terminal state of one conversion request.

        Args:
            outcome: One of OUTCOMES.
            duration: Handler time in seconds, if measured.
        """
        if not self._enabled:
            return
        self._requests_total.labels(outcome=outcome).inc()
        if duration is not None:
            self._request_duration.observe(duration)

    def record_provider_call(self, status: str, duration: float) -> None:
        """Record one provider round-trip ("ok" or "error")."""
        if not self._enabled:
            return
        self._provider_duration.labels(status=status).observe(duration)

    def record_error(self, kind: str) -> None:
        """Record a synthesis failure, ``kind`` is "provider" or "storage"."""
        if not self._enabled:
            return
        self._errors_total.labels(kind=kind).inc()

    def record_audio_bytes(self, count: int) -> None:
        if not self._enabled or count <= 0:
            return
        self._audio_bytes_total.inc(count)

    def get_metrics_response(self) -> tuple[bytes, str]:
        """
        Get metrics in Prometheus text format.

        Returns:
            Tuple of (content_bytes, content_type)
        """
        if not self._enabled:
            return (
                b"# Metrics not available (prometheus_client not installed)\n",
                "text/plain; charset=utf-8",
            )
        return generate_latest(self._registry), CONTENT_TYPE_LATEST


# Global metrics instance: from tts_convert.core.metrics import metrics
metrics = ConvertMetrics()
