"""Tests for the structured log formatter."""

import logging

from artifact_engine.core.logging import StructuredFormatter, get_logger, log_with_context


def _record(**extra):
    record = logging.LogRecord("artifact_engine.test", logging.WARNING, __file__, 1, "Degraded", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_key_value_output(self):
        line = StructuredFormatter().format(_record())
        assert "level=WARNING" in line
        assert "message=Degraded" in line

    def test_context_fields_are_appended(self):
        line = StructuredFormatter().format(_record(response_id="r-1", extra_data={"kind": "work_order"}))
        assert "response_id=r-1" in line
        assert "kind=work_order" in line


class TestLogWithContext:
    def test_passes_context_as_extra(self, caplog):
        logger = get_logger("artifact_engine.tests.context")
        logger.propagate = True
        with caplog.at_level(logging.INFO, logger="artifact_engine.tests.context"):
            log_with_context(logger, logging.INFO, "Resolved", response_id="r-2", kind="checklist")

        record = caplog.records[-1]
        assert record.response_id == "r-2"
        assert record.extra_data == {"kind": "checklist"}
