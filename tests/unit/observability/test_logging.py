"""Unit tests for observability logging: redaction and JSON configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest
import structlog
from structlog.testing import capture_logs

from directory_rbac.observability.logging import (
    DEFAULT_SENSITIVE_FIELDS,
    JsonLoggerFactory,
    RedactSensitiveFields,
    SensitiveFieldsFilter,
    get_logger,
)


# ---------------------------------------------------------------------------
# SensitiveFieldsFilter
# ---------------------------------------------------------------------------


class TestSensitiveFieldsFilter:
    def test_redacts_known_sensitive_key(self) -> None:
        f = SensitiveFieldsFilter()
        result = f.redact({"mail": "john.doe@company.com", "title": "Auditor"})
        assert result["mail"] == SensitiveFieldsFilter.REDACTED
        assert result["title"] == "Auditor"

    def test_redacts_all_default_sensitive_fields(self) -> None:
        f = SensitiveFieldsFilter()
        result = f.redact({field: "value" for field in DEFAULT_SENSITIVE_FIELDS})
        assert set(result.values()) == {SensitiveFieldsFilter.REDACTED}

    def test_directory_attribute_names_are_case_insensitive(self) -> None:
        f = SensitiveFieldsFilter()
        result = f.redact({"Mail": "x", "telephoneNumber": "555-0100"})
        assert result == {"Mail": "[REDACTED]", "telephoneNumber": "[REDACTED]"}

    def test_custom_fields_replace_defaults(self) -> None:
        f = SensitiveFieldsFilter(frozenset({"title"}))
        result = f.redact({"title": "Auditor", "mail": "x@y"})
        assert result == {"title": "[REDACTED]", "mail": "x@y"}

    def test_redact_deep_nested(self) -> None:
        f = SensitiveFieldsFilter()
        result = f.redact_deep({"principal_id": 1, "attributes": {"mail": "x@y", "title": "Auditor"}})
        assert result["attributes"]["mail"] == "[REDACTED]"
        assert result["attributes"]["title"] == "Auditor"
        assert result["principal_id"] == 1

    def test_does_not_mutate_input(self) -> None:
        data = {"mail": "x@y"}
        SensitiveFieldsFilter().redact(data)
        assert data == {"mail": "x@y"}


# ---------------------------------------------------------------------------
# RedactSensitiveFields processor
# ---------------------------------------------------------------------------


class TestRedactSensitiveFields:
    def test_processor_redacts_event_dict(self) -> None:
        processor = RedactSensitiveFields()
        out = processor(None, "info", {"event": "rbac.resolution_breakdown", "attributes": {"mail": "x@y"}})
        assert out["event"] == "rbac.resolution_breakdown"
        assert out["attributes"]["mail"] == "[REDACTED]"


# ---------------------------------------------------------------------------
# get_logger
# ---------------------------------------------------------------------------


class TestGetLogger:
    def test_emits_structured_event(self) -> None:
        log = get_logger("tests.logging")
        with capture_logs() as logs:
            log.info("rbac.test_event", principal_id=7)
        assert logs == [{"event": "rbac.test_event", "principal_id": 7, "log_level": "info"}]

    def test_initial_values_are_bound(self) -> None:
        with capture_logs() as logs:
            log = get_logger("tests.logging", component="resolver")
            log.warning("rbac.bound")
        assert logs[0]["component"] == "resolver"


# ---------------------------------------------------------------------------
# JsonLoggerFactory
# ---------------------------------------------------------------------------


@pytest.fixture
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_logging")
class TestJsonLoggerFactory:
    def test_installs_single_root_handler(self) -> None:
        handler = JsonLoggerFactory.configure(cache_logger_on_first_use=False)
        assert logging.getLogger().handlers == [handler]
        assert logging.getLogger().level == logging.INFO

    def test_renders_json_with_redaction(self, capsys: pytest.CaptureFixture[str]) -> None:
        JsonLoggerFactory.configure(logging.DEBUG, cache_logger_on_first_use=False)
        structlog.get_logger("tests.json").info("rbac.resolved", principal_id=1, mail="john.doe@company.com")
        line = capsys.readouterr().err.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "rbac.resolved"
        assert payload["principal_id"] == 1
        assert payload["mail"] == "[REDACTED]"
        assert payload["level"] == "info"
        assert payload["logger"] == "tests.json"
        assert "timestamp" in payload

    def test_level_filters_debug(self, capsys: pytest.CaptureFixture[str]) -> None:
        JsonLoggerFactory.configure(logging.WARNING, cache_logger_on_first_use=False)
        structlog.get_logger("tests.json").info("rbac.quiet")
        assert capsys.readouterr().err == ""
