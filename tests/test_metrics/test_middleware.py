"""Tests for the Prometheus request middleware."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from rebook.metrics.middleware import PrometheusMiddleware


@pytest.fixture
def _app_with_metrics() -> tuple[FastAPI, CollectorRegistry]:
    registry = CollectorRegistry()
    app = FastAPI()
    app.add_middleware(PrometheusMiddleware, registry=registry)

    @app.get("/contacts/{contact_id}")
    async def get_contact(contact_id: str) -> dict[str, str]:
        return {"id": contact_id}

    return app, registry


class TestPrometheusMiddleware:
    """Tests for PrometheusMiddleware."""

    def test_records_count_and_duration(self, _app_with_metrics: tuple) -> None:
        app, registry = _app_with_metrics
        TestClient(app).get("/contacts/abc")
        metric_names = {m.name for m in registry.collect()}
        assert "http_request" in metric_names
        assert "http_request_duration_seconds" in metric_names

    def test_labels_use_route_template(self, _app_with_metrics: tuple) -> None:
        app, registry = _app_with_metrics
        client = TestClient(app)
        client.get("/contacts/a")
        client.get("/contacts/b")
        client.get("/contacts/c")
        value = registry.get_sample_value(
            "http_request_total",
            {
                "method": "GET",
                "path": "/contacts/{contact_id}",
                "status_code": "200",
                "app": "rebook",
            },
        )
        assert value == 3.0

    def test_unmatched_path_uses_raw_path(self, _app_with_metrics: tuple) -> None:
        app, registry = _app_with_metrics
        TestClient(app).get("/nope")
        value = registry.get_sample_value(
            "http_request_total",
            {"method": "GET", "path": "/nope", "status_code": "404", "app": "rebook"},
        )
        assert value == 1.0
