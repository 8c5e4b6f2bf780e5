import json
from datetime import datetime, timedelta, timezone

import pytest

from agent.logsentinel.parser.base import DEFAULT_LEVEL, UNKNOWN_SOURCE, LogEvent, parse_timestamp
from agent.logsentinel.parser.delimited import DelimitedParser
from agent.logsentinel.parser.line import LineParser
from agent.logsentinel.parser.structured import StructuredParser

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def parser():
    return LineParser()


class TestStructuredLines:
    def test_error_with_exception(self, parser):
        line = '{"@t":"2024-01-01T00:00:00Z","@l":"Error","@mt":"boom","@x":"trace..."}'
        event = parser.parse(line)
        assert event == LogEvent(
            source=UNKNOWN_SOURCE,
            level="Error",
            message="boom",
            stack_trace="trace...",
            timestamp=JAN_1,
        )

    def test_information_is_dropped(self, parser):
        assert parser.parse('{"@l":"Information","@mt":"ok"}') is None

    def test_missing_level_defaults_to_information_and_is_dropped(self, parser):
        assert parser.parse('{"@mt":"request served"}') is None

    def test_exception_qualifies_any_level(self, parser):
        event = parser.parse('{"@l":"Warning","@mt":"retrying","@x":"System.TimeoutException"}')
        assert event.level == "Warning"
        assert event.stack_trace == "System.TimeoutException"

    def test_missing_level_with_exception(self, parser):
        event = parser.parse('{"@mt":"oops","@x":"boom"}')
        assert event.level == DEFAULT_LEVEL

    def test_fatal_without_exception(self, parser):
        event = parser.parse('{"@l":"Fatal","@mt":"host terminated","SourceContext":"Api.Program"}')
        assert event.level == "Fatal"
        assert event.source == "Api.Program"
        assert event.stack_trace == ""

    def test_alternate_message_key(self, parser):
        event = parser.parse('{"@l":"Error","@m":"Rendered 42"}')
        assert event.message == "Rendered 42"

    def test_template_preferred_over_rendered(self, parser):
        event = parser.parse('{"@l":"Error","@mt":"Order {Id} failed","@m":"Order 7 failed"}')
        assert event.message == "Order {Id} failed"

    def test_null_template_does_not_fall_back_to_rendered(self, parser):
        event = parser.parse('{"@l":"Error","@mt":null,"@m":"rendered"}')
        assert event.message == ""

    def test_level_match_is_case_sensitive(self, parser):
        assert parser.parse('{"@l":"error","@mt":"lowercase"}') is None

    def test_leading_whitespace(self, parser):
        event = parser.parse('   {"@l":"Error","@mt":"indented"}')
        assert event.message == "indented"

    def test_seven_digit_fraction(self, parser):
        event = parser.parse('{"@t":"2024-01-01T00:00:00.1234567Z","@l":"Error","@mt":"x"}')
        assert event.timestamp == JAN_1 + timedelta(microseconds=123456)

    def test_dropped_record_skips_delimited_strategy(self, parser):
        # Would satisfy the pipe format, but it decoded as JSON first
        line = json.dumps({"@l": "Debug", "@mt": "a|b|c|d|e"})
        assert parser.parse(line) is None


class TestMalformedStructuredLines:
    def test_malformed_json_falls_through_to_delimited(self, parser):
        event = parser.parse("{broken|Error|Worker|bad json|detail")
        assert event is not None
        assert event.level == "Error"
        assert event.source == "Worker"
        assert event.message == "bad json"

    def test_malformed_json_without_pipes_is_rejected(self, parser):
        assert parser.parse('{"@l":"Error",') is None

    def test_non_string_field_falls_through(self, parser):
        assert parser.parse('{"@l":5,"@mt":"numeric level"}') is None

    def test_structured_decode_rejects_arrays(self):
        assert StructuredParser().decode("[1, 2, 3]") is None


class TestDelimitedLines:
    def test_positional_mapping(self, parser):
        event = parser.parse("2024-01-01T00:00:00Z|Fatal|PaymentService|Crash|at line 10")
        assert event == LogEvent(
            source="PaymentService",
            level="Fatal",
            message="Crash",
            stack_trace="at line 10",
            timestamp=JAN_1,
        )

    @pytest.mark.parametrize(
        "line",
        [
            "not a valid line",
            "",
            "a|b|c|d",
            "2024-01-01|Error|Svc|only four",
        ],
    )
    def test_fewer_than_five_fields(self, parser, line):
        assert parser.parse(line) is None

    def test_extra_fields_are_ignored(self, parser):
        event = parser.parse("2024-01-01T00:00:00Z|Error|Svc|Msg|Detail|extra|more")
        assert (event.source, event.message, event.stack_trace) == ("Svc", "Msg", "Detail")

    def test_no_severity_filter(self, parser):
        event = parser.parse("2024-01-01T00:00:00Z|Information|Svc|started|")
        assert event.level == "Information"
        assert event.stack_trace == ""

    def test_fields_are_stripped_and_defaulted(self):
        event = DelimitedParser().parse("2024-01-01T00:00:00Z | | |  Disk full | ")
        assert event.level == DEFAULT_LEVEL
        assert event.source == UNKNOWN_SOURCE
        assert event.message == "Disk full"

    def test_bad_timestamp_uses_ingestion_time(self, parser):
        before = datetime.now(timezone.utc)
        event = parser.parse("yesterday|Error|Svc|Msg|Detail")
        after = datetime.now(timezone.utc)
        assert before <= event.timestamp <= after


class TestParseProperties:
    @pytest.mark.parametrize(
        "line",
        [
            '{"@t":"2024-01-01T00:00:00Z","@l":"Error","@mt":"boom","@x":"trace..."}',
            "2024-01-01T00:00:00Z|Fatal|PaymentService|Crash|at line 10",
        ],
    )
    def test_reparsing_is_idempotent(self, parser, line):
        assert parser.parse(line) == parser.parse(line)

    def test_events_are_immutable(self, parser):
        event = parser.parse("2024-01-01T00:00:00Z|Fatal|Svc|Crash|trace")
        with pytest.raises(AttributeError):
            event.message = "changed"


class TestTimestamps:
    def test_naive_timestamp_is_utc(self):
        assert parse_timestamp("2024-01-01 00:00:00") == JAN_1

    def test_offset_is_kept(self):
        parsed = parse_timestamp("2024-01-01T02:00:00+02:00")
        assert parsed == JAN_1

    @pytest.mark.parametrize("value", [None, "", "not a date"])
    def test_fallback_is_aware_now(self, value):
        parsed = parse_timestamp(value)
        assert parsed.tzinfo is not None
        assert abs(datetime.now(timezone.utc) - parsed) < timedelta(seconds=5)
