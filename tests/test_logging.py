"""Structured logging: context binding, formatters and custom levels."""

import json
import logging

from core.logging import StructuredLogger, bind, get_context, log_context, unbind
from core.logging.context import ContextFilter
from core.logging.formatter import ConsoleFormatter, JSONFormatter
from core.logging.levels import LogLevel, register_levels, to_level


def make_record(msg="hello", **extra):
    record = logging.LogRecord("tft.test", logging.INFO, __file__, 10, msg, None, None, func="fn")
    for k, v in extra.items():
        setattr(record, k, v)
    return record


class TestContext:

    def test_log_context_restores_previous_values(self):
        with log_context(region="EUW", job="ingest"):
            assert get_context() == {"region": "EUW", "job": "ingest"}
            with log_context(region="KR"):
                assert get_context()["region"] == "KR"
            assert get_context()["region"] == "EUW"
        assert get_context() == {}

    def test_bind_and_unbind(self):
        bind(match_id="EUW_1", ignored=None)
        assert get_context() == {"match_id": "EUW_1"}
        unbind("match_id")
        assert get_context() == {}

    def test_filter_snapshots_context_on_the_record(self):
        record = make_record()
        with log_context(region="NA"):
            ContextFilter().filter(record)
        # formatted later, outside the block (as the queue listener thread would)
        payload = json.loads(JSONFormatter().format(record))
        assert payload["region"] == "NA"


class TestFormatters:

    def test_json_promotes_known_keys_and_nests_the_rest(self):
        record = make_record(service="ingestion", log_context={"region": "EUW", "batch": 2})
        payload = json.loads(JSONFormatter().format(record))
        assert payload["message"] == "hello"
        assert payload["service"] == "ingestion"
        assert payload["region"] == "EUW"
        assert payload["context"] == {"batch": 2}

    def test_console_without_colors(self):
        record = make_record(service="refresh", log_context={"region": "KR"}, execution_time_ms=1.5)
        line = ConsoleFormatter(colors=False).format(record)
        assert "[KR]" in line
        assert "t=1.5ms" in line
        assert "\033[" not in line


class TestLevels:

    def test_custom_levels_are_registered(self):
        register_levels()
        assert logging.getLevelName(int(LogLevel.SUCCESS)) == "SUCCESS"
        assert to_level("trace") == int(LogLevel.TRACE)
        assert to_level(None) == logging.INFO

    def test_lazy_messages_are_not_built_when_disabled(self, caplog):
        base = logging.getLogger("tft.lazy")
        base.setLevel(logging.INFO)
        log = StructuredLogger(base, service="svc")
        calls = []

        def expensive():
            calls.append(1)
            return "built"

        with caplog.at_level(logging.INFO, logger="tft.lazy"):
            log.debug(expensive)
            log.info(expensive)
        assert calls == [1]
        assert caplog.records[-1].getMessage() == "built"
        assert caplog.records[-1].service == "svc"
