"""
Tests for JSON log records and tracker context.
"""

import json
import logging

from gpsw.utils.log import JSONFormatter, with_context


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def _logger(name):
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = ListHandler()
    logger.handlers = [handler]
    return logger, handler


class TestContext:

    def test_context_reaches_json(self):
        logger, handler = _logger("gpsw.test.context")
        with_context(logger, tracker_id="Tracker3", generation=2).info("Window %s", "reset")

        entry = json.loads(JSONFormatter().format(handler.records[0]))
        assert entry["tracker_id"] == "Tracker3"
        assert entry["generation"] == 2
        assert entry["message"] == "[tracker_id=Tracker3 generation=2] Window reset"
        assert entry["level"] == "INFO"

    def test_call_extra_merges_over_bound(self):
        logger, handler = _logger("gpsw.test.merge")
        with_context(logger, tracker_id="Tracker1").debug("step", extra={"generation": 5})

        record = handler.records[0]
        assert record.tracker_id == "Tracker1"
        assert record.generation == 5

    def test_plain_records_have_no_context_keys(self):
        logger, handler = _logger("gpsw.test.plain")
        logger.info("hello")

        entry = json.loads(JSONFormatter().format(handler.records[0]))
        assert "tracker_id" not in entry
        assert "generation" not in entry
        assert entry["message"] == "hello"
