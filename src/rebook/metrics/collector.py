"""Metrics collector — Prometheus counters and histograms.

- ``rebook_registrations_total`` counter
- ``rebook_logins_total`` counter-vec (outcome: success | failure)
- ``rebook_contact_quota_rejections_total`` counter
- ``rebook_add_contact_histogram``
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator


_PREFIX = "rebook"

LOGIN_SUCCESS = "success"
LOGIN_FAILURE = "failure"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`EngineMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class EngineMetrics:
    """High-level engine metrics.

    Histograms track operation duration in seconds.
    """

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._registrations = self._collector.counter(
            f"{_PREFIX}_registrations",
            "Accounts registered",
        )
        self._logins = self._collector.counter(
            f"{_PREFIX}_logins",
            "Login attempts by outcome",
            ("outcome",),
        )
        self._quota_rejections = self._collector.counter(
            f"{_PREFIX}_contact_quota_rejections",
            "Add-contact requests rejected because the owner was at quota",
        )
        self._add_contact = self._collector.histogram(
            f"{_PREFIX}_add_contact_histogram",
            "Duration of add contact operations",
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def record_registration(self) -> None:
        self._registrations.inc()

    def record_login(self, *, success: bool) -> None:
        outcome = LOGIN_SUCCESS if success else LOGIN_FAILURE
        self._logins.labels(outcome=outcome).inc()

    def record_quota_rejection(self) -> None:
        self._quota_rejections.inc()

    @contextmanager
    def track_add_contact(self) -> Iterator[None]:
        """Track the duration of an add-contact operation."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._add_contact.observe(time.monotonic() - start)
