"""
Tests for the structured JSON log formatter.
"""

from __future__ import annotations

import json
import logging

from mailtriage.shared.infrastructure.logging import CustomJsonFormatter, log_latency


def _format(**extra) -> dict:
    formatter = CustomJsonFormatter("%(name)s %(levelname)s %(message)s", environment="staging")
    record = logging.LogRecord("mailtriage.test", logging.INFO, __file__, 1, "Relevance scored", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(formatter.format(record))


def test_formatter_adds_context_fields():
    data = _format(correlation_id="abc-123", outcome="scored")
    assert data["message"] == "Relevance scored"
    assert data["correlation_id"] == "abc-123"
    assert data["environment"] == "staging"
    assert data["outcome"] == "scored"
    assert "timestamp" in data


def test_formatter_redacts_secrets():
    data = _format(api_key="sk-secret", access_token="tok", prompt_tokens=12)
    assert data["api_key"] == "***REDACTED***"
    assert data["access_token"] == "***REDACTED***"
    assert data["prompt_tokens"] == 12


def test_log_latency_records_operation(caplog):
    logger = logging.getLogger("mailtriage.test.latency")
    with caplog.at_level(logging.INFO, logger="mailtriage.test.latency"):
        with log_latency(logger, "relevance_completion", attempt=2):
            pass

    record = caplog.records[-1]
    assert record.operation == "relevance_completion"
    assert record.attempt == 2
    assert record.latency_ms >= 0
