"""Tests for engine-level metrics."""

from __future__ import annotations

import pytest

from rebook.metrics.collector import EngineMetrics, MetricsCollector


class TestEngineMetrics:
    def test_own_registry_per_instance(self) -> None:
        assert EngineMetrics().registry is not EngineMetrics().registry

    def test_shared_collector(self) -> None:
        collector = MetricsCollector()
        assert EngineMetrics(collector).registry is collector.registry

    def test_counters(self) -> None:
        metrics = EngineMetrics()
        metrics.record_registration()
        metrics.record_login(success=True)
        metrics.record_login(success=False)
        metrics.record_login(success=False)
        metrics.record_quota_rejection()

        registry = metrics.registry
        assert registry.get_sample_value("rebook_registrations_total") == 1.0
        assert registry.get_sample_value("rebook_logins_total", {"outcome": "success"}) == 1.0
        assert registry.get_sample_value("rebook_logins_total", {"outcome": "failure"}) == 2.0
        assert registry.get_sample_value("rebook_contact_quota_rejections_total") == 1.0

    def test_add_contact_timer_records_on_error(self) -> None:
        metrics = EngineMetrics()
        with metrics.track_add_contact():
            pass
        with pytest.raises(RuntimeError), metrics.track_add_contact():
            raise RuntimeError("boom")
        assert metrics.registry.get_sample_value("rebook_add_contact_histogram_count") == 2.0
