import json
import logging

from fastapi.testclient import TestClient

from app.main import app
from shared.core import HealthStatus, ServiceHealth
from shared.core.logging_config import REDACTED, SecurityFilter, StructuredFormatter, request_id_var


def test_liveness_and_readiness():
    client = TestClient(app)
    assert client.get("/health/live").json() == {"status": "alive"}

    resp = client.get("/health/ready")
    assert resp.status_code in [200, 503]
    body = resp.json()
    assert body["serviceId"] == "stock-service"
    assert "catalog:connectivity" in body["checks"]


def test_metrics_endpoint():
    body = TestClient(app).get("/metrics").json()
    assert body["service"] == "stock-service"
    assert "uptime_seconds" in body


def test_overall_status_precedence():
    assert ServiceHealth.overall_status({}) == HealthStatus.PASS
    assert ServiceHealth.overall_status({"a": {"status": "pass"}, "b": {"status": "warn"}}) == HealthStatus.WARN
    assert ServiceHealth.overall_status({"a": {"status": "warn"}, "b": {"status": "fail"}}) == HealthStatus.FAIL


def _record(**extra_fields):
    record = logging.LogRecord("stock", logging.INFO, __file__, 1, "Computed sale preview", None, None)
    record.extra_fields = extra_fields
    return record


def test_formatter_emits_json_with_custom_fields():
    record = _record(line_items=2, any_negative=True)
    payload = json.loads(StructuredFormatter().format(record))
    assert payload["message"] == "Computed sale preview"
    assert payload["level"] == "INFO"
    assert payload["custom"] == {"line_items": 2, "any_negative": True}


def test_security_filter_masks_sensitive_keys():
    record = _record(api_key="abc", nested={"password": "hunter2", "part_id": "part-a"})
    assert SecurityFilter().filter(record) is True
    assert record.extra_fields["api_key"] == REDACTED
    assert record.extra_fields["nested"] == {"password": REDACTED, "part_id": "part-a"}


def test_formatter_tags_records_with_current_request_id():
    token = request_id_var.set("req-42")
    try:
        payload = json.loads(StructuredFormatter().format(_record()))
    finally:
        request_id_var.reset(token)
    assert payload["trace"] == {"request_id": "req-42"}
    assert "trace" not in json.loads(StructuredFormatter().format(_record()))
