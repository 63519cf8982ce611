"""Tests for the request log line and the pass-through logging stage."""

import re

from structlog.testing import capture_logs


def _entries(logs, event):
    return [entry for entry in logs if entry["event"] == event]


class TestRequestLogger:
    def test_line_format(self, client):
        with capture_logs() as logs:
            client.get("/hello.txt")
        [entry] = [e for e in logs if e.get("path") == "/hello.txt" and "status" in e]
        assert re.fullmatch(r"GET /hello\.txt 200 \d+\.\d{3} ms - 12", entry["event"])
        assert entry["log_level"] == "info"
        assert entry["method"] == "GET"
        assert entry["status"] == 200

    def test_failed_request_still_logged_as_500(self, client):
        with capture_logs() as logs:
            client.get("/")
        [entry] = [e for e in logs if e.get("path") == "/" and "status" in e]
        assert re.fullmatch(r"GET / 500 \d+\.\d{3} ms - 5", entry["event"])

    def test_error_handler_logs_exception(self, client):
        with capture_logs() as logs:
            client.get("/")
        [entry] = _entries(logs, "request_failed")
        assert entry["log_level"] == "error"
        assert entry["error"] == "Error"
        assert entry["exc_info"] is True


class TestEveryRequestLogger:
    def test_logged_for_routed_requests(self, client):
        with capture_logs() as logs:
            client.post("/req")
        [entry] = _entries(logs, "run every request")
        assert entry["path"] == "/req"

    def test_static_files_answer_before_it(self, client):
        with capture_logs() as logs:
            client.get("/hello.txt")
        assert _entries(logs, "run every request") == []
