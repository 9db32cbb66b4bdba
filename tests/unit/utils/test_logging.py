"""Tests for the context-aware log formatter."""

import logging

from newsnexus.utils.logging import ContextFormatter, get_logger


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("newsnexus.test", logging.INFO, __file__, 10, "Stored %d", (3,), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_extra_fields_are_appended():
    formatter = ContextFormatter(fmt="%(levelname)s %(message)s")

    line = formatter.format(_record(request_id=9, failures=0))

    assert line == "INFO Stored 3 | failures=0 request_id=9"


def test_plain_record_is_unchanged():
    formatter = ContextFormatter(fmt="%(levelname)s %(message)s")

    assert formatter.format(_record()) == "INFO Stored 3"


def test_get_logger_configures_once():
    first = get_logger("newsnexus.tests.once", level="debug")
    second = get_logger("newsnexus.tests.once")

    assert first is second
    assert len(second.handlers) == 1
    assert isinstance(second.handlers[0].formatter, ContextFormatter)
