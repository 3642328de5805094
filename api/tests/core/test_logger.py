"""Unit tests for core.logger module.

Tests the structlog-over-stdlib configuration:
- JSON output when LOG_FORMAT=json, with extra={} fields as keys
- Context variables bound per request appear in output
- LOG_LEVEL is honoured
- Noisy third-party loggers are quieted
"""

import json
import logging

import pytest

from core.logger import bind_contextvars, clear_contextvars, configure_logging

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _clean_root_logger():
    """Save and restore root logger state around each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    clear_contextvars()


def _last_json_line(output: str) -> dict:
    lines = [line for line in output.strip().splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestJsonLogging:
    def test_stdlib_extra_fields_are_rendered(self, monkeypatch, capsys):
        monkeypatch.setenv("LOG_FORMAT", "json")
        configure_logging()

        logging.getLogger("test.module").info(
            "certificate.created", extra={"certificate_id": "abc-123"}
        )

        parsed = _last_json_line(capsys.readouterr().out)
        assert parsed["event"] == "certificate.created"
        assert parsed["certificate_id"] == "abc-123"
        assert parsed["level"] == "info"
        assert parsed["logger"] == "test.module"
        assert "timestamp" in parsed

    def test_context_vars_are_merged(self, monkeypatch, capsys):
        monkeypatch.setenv("LOG_FORMAT", "json")
        configure_logging()

        bind_contextvars(request_id="req-1")
        logging.getLogger("test.module").warning("qr.render.failed")

        parsed = _last_json_line(capsys.readouterr().out)
        assert parsed["request_id"] == "req-1"
        assert parsed["level"] == "warning"


class TestConfiguration:
    def test_log_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        configure_logging()
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_log_level_defaults_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_single_root_handler(self):
        configure_logging()
        configure_logging()
        assert len(logging.getLogger().handlers) == 1

    def test_quiets_noisy_loggers(self):
        configure_logging()
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
        assert logging.getLogger("PIL").level == logging.WARNING
