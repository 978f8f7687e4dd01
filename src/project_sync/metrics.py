"""Prometheus metrics for webhook and sync observability.

Metrics are exposed at the `/metrics` endpoint in Prometheus format.

Metrics Defined:
- project_sync_webhooks_total: Counter of webhook deliveries by event kind
  (issue, pull_request, other, or unverified before the signature check
  passes) and outcome (handled, ignored, or the error kind)
- project_sync_remote_failures_total: Counter of failed orchestration steps
- project_sync_duration_seconds: Histogram of orchestration time
"""

from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


# A sync is a handful of GitHub calls bounded by a ~10s deadline
DEFAULT_DURATION_BUCKETS = (
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
    30.0,
)


class SyncMetrics:
    """Container for all project sync Prometheus metrics.

    Each instance owns its registry unless one is passed in, so several
    application instances (as in tests) never collide on metric names.

    Attributes:
        registry: The Prometheus registry for these metrics.
        webhooks_total: Counter for webhook deliveries.
            Labels: event, outcome
        remote_failures_total: Counter for failed orchestration steps.
            Labels: step, kind
        sync_duration_seconds: Histogram for orchestration duration.

    Example:
        >>> metrics = SyncMetrics()
        >>> metrics.record_webhook("issue", "handled")
        >>> metrics.sync_duration_seconds.observe(0.42)
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        self.webhooks_total = Counter(
            "project_sync_webhooks_total",
            "Webhook deliveries received, by event type and outcome",
            labelnames=["event", "outcome"],
            registry=self.registry,
        )

        self.remote_failures_total = Counter(
            "project_sync_remote_failures_total",
            "Orchestration steps that failed, by step and failure kind",
            labelnames=["step", "kind"],
            registry=self.registry,
        )

        self.sync_duration_seconds = Histogram(
            "project_sync_duration_seconds",
            "Time spent running the board sync sequence",
            buckets=DEFAULT_DURATION_BUCKETS,
            registry=self.registry,
        )

    def record_webhook(self, event: str, outcome: str) -> None:
        self.webhooks_total.labels(event=event or "unknown", outcome=outcome).inc()

    def record_failure(self, step: Optional[str], kind: str) -> None:
        self.remote_failures_total.labels(step=step or "unknown", kind=kind).inc()

    def generate(self) -> bytes:
        """Render all metrics in the Prometheus text format."""
        return generate_latest(self.registry)
