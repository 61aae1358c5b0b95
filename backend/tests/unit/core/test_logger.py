from __future__ import annotations

import json
import logging

from videotube.core.logger import JSONFormatter, RequestIdFilter, ensure_request_id


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="videotube.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="user %s logged in",
        args=("alice",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_renders_message_and_known_extras():
    payload = json.loads(JSONFormatter().format(_record(user_id=7, request_id="r-1", secret="x")))

    assert payload["message"] == "user alice logged in"
    assert payload["level"] == "INFO"
    assert payload["name"] == "videotube.test"
    assert payload["request_id"] == "r-1"
    assert payload["user_id"] == 7
    assert "secret" not in payload


def test_request_id_filter_outside_request_sets_none():
    record = _record()
    assert RequestIdFilter().filter(record) is True
    assert record.request_id is None


def test_ensure_request_id_prefers_correlation_header(app):
    # A fresh app context gives the request an empty ``g``.
    with app.app_context(), app.test_request_context(headers={"X-Correlation-ID": "corr-42"}):
        assert ensure_request_id() == "corr-42"
        assert ensure_request_id() == "corr-42"


def test_ensure_request_id_generates_and_caches(app):
    with app.app_context(), app.test_request_context():
        first = ensure_request_id()
        assert first
        assert ensure_request_id() == first


def test_response_echoes_request_id(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"
