from __future__ import annotations

import json
import logging

from brokerdesk.logging_config import JsonFormatter, request_id_ctx
from brokerdesk.middleware.structured_logging import resolve_request_id


def test_health(api):
    r = api.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy", "service": "brokerdesk-backend", "version": "1.0.0"}


def test_request_id_is_echoed_or_generated(api):
    r = api.get("/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"

    r = api.get("/health")
    assert len(r.headers["X-Request-ID"]) == 36


def test_json_formatter_includes_request_id_and_extras():
    record = logging.LogRecord("brokerdesk.test", logging.INFO, __file__, 1, "client.create", None, None)
    record.event = "client.create"
    record.entity_id = "c-1"

    token = request_id_ctx.set("rid-9")
    try:
        line = json.loads(JsonFormatter().format(record))
    finally:
        request_id_ctx.reset(token)

    assert line["message"] == "client.create"
    assert line["level"] == "INFO"
    assert line["request_id"] == "rid-9"
    assert line["event"] == "client.create"
    assert line["entity_id"] == "c-1"
    assert "user_id" not in line


def test_unsafe_inbound_request_id_is_replaced(api):
    r = api.get("/health", headers={"X-Request-ID": "a b {json}"})
    rid = r.headers["X-Request-ID"]
    assert rid != "a b {json}"
    assert len(rid) == 36

    assert resolve_request_id("x" * 129) != "x" * 129
    assert resolve_request_id("trace-01.ab:9") == "trace-01.ab:9"
    assert len(resolve_request_id(None)) == 36


def test_request_line_is_logged_with_request_id(api, caplog):
    caplog.set_level(logging.INFO, logger="brokerdesk.request")
    api.get("/health?verbose=1", headers={"X-Request-ID": "req-log", "Authorization": "Bearer secret-token"})

    records = [r for r in caplog.records if r.name == "brokerdesk.request"]
    assert len(records) == 1
    rec = records[0]
    assert rec.request_id == "req-log"
    assert rec.method == "GET"
    assert rec.path == "/health"
    assert rec.status_code == 200
    assert rec.authenticated is True
    assert "secret-token" not in json.dumps(rec.__dict__, default=str)
