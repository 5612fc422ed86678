"""Tests for the JSON log formatter."""

import json
import logging

from release_console.middleware.logging_config import JSONFormatter


def _record(**extra):
    record = logging.LogRecord(
        name="release_console.services.app_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Application created",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_service_extras_are_emitted():
    line = JSONFormatter().format(_record(
        app_id=3, user_id=7, repository="group/billing", port=9003,
        role="5002", branch="daily/1.0.0", fields=["description"], count=10,
    ))

    entry = json.loads(line)
    assert entry["message"] == "Application created"
    assert entry["repository"] == "group/billing"
    assert entry["port"] == 9003
    assert entry["user_id"] == 7
    assert entry["role"] == "5002"
    assert entry["branch"] == "daily/1.0.0"
    assert entry["fields"] == ["description"]
    assert entry["count"] == 10


def test_unset_extras_are_omitted():
    entry = json.loads(JSONFormatter().format(_record()))
    assert "repository" not in entry
    assert "count" not in entry
