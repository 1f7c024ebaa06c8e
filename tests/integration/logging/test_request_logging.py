import json
import logging
import re
from pathlib import Path

import pytest

from src.infra.config.settings import settings

COMBINED_LOG_LINE = re.compile(
    r'^\S+ - - \[\d{2}/\w{3}/\d{4}:\d{2}:\d{2}:\d{2} [+-]\d{4}\] '
    r'"(?P<method>[A-Z]+) (?P<target>\S+) HTTP/[\d.]+" (?P<status>\d{3}) (?:\d+|-) "[^"]*" "[^"]*"$'
)


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Setup logging to capture logs in tests"""
    caplog.set_level(logging.INFO)
    yield


def get_json_logs(caplog):
    """Extract JSON logs from caplog output"""
    logs = []
    for record in caplog.records:
        try:
            if isinstance(record.msg, str) and record.msg.startswith("{"):
                logs.append(json.loads(record.msg))
        except (json.JSONDecodeError, AttributeError):
            continue
    return logs


def _error_log_lines():
    path = Path(settings.ERROR_LOG_PATH)
    if not path.exists():
        return []
    return path.read_text(encoding="utf-8").splitlines()


def test_request_logging(client, caplog):
    """Test that API requests are logged with correlation ID"""
    correlation_id = "test-correlation-id"
    response = client.get("/users", headers={"X-Request-ID": correlation_id})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == correlation_id

    request_logs = [log for log in get_json_logs(caplog) if log.get("request_id") == correlation_id]
    assert len(request_logs) == 1

    request_log = request_logs[0]
    assert request_log["method"] == "GET"
    assert request_log["path"] == "/users"
    assert request_log["status_code"] == 200
    assert isinstance(request_log["duration_ms"], (int, float))


def test_request_id_generated_when_missing(client):
    response = client.get("/users")

    assert response.headers.get("X-Request-ID")


def test_failed_requests_appended_to_error_log(client):
    before = len(_error_log_lines())

    client.get("/users")
    client.post("/users?source=test", json={}, headers={"User-Agent": "contract-test"})

    lines = _error_log_lines()
    assert len(lines) == before + 1

    match = COMBINED_LOG_LINE.match(lines[-1])
    assert match is not None
    assert match.group("method") == "POST"
    assert match.group("target") == "/users?source=test"
    assert match.group("status") == "400"
    assert lines[-1].endswith('"contract-test"')


def test_service_errors_are_logged(client, caplog):
    client.put("/users/unknown", json={})

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING and "Service error" in r.getMessage()]
    assert warnings
    assert warnings[-1].error_code == "INVALID_INPUT"
