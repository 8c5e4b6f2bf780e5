import json
from typing import Any, Dict, Optional

from .base import DEFAULT_LEVEL, UNKNOWN_SOURCE, LogEvent, LogParser, parse_timestamp

# Serilog compact JSON (CLEF) property names
TIMESTAMP_KEY = "@t"
LEVEL_KEY = "@l"
MESSAGE_TEMPLATE_KEY = "@mt"
MESSAGE_KEY = "@m"
EXCEPTION_KEY = "@x"
SOURCE_CONTEXT_KEY = "SourceContext"

KNOWN_KEYS = (
    TIMESTAMP_KEY,
    LEVEL_KEY,
    MESSAGE_TEMPLATE_KEY,
    MESSAGE_KEY,
    EXCEPTION_KEY,
    SOURCE_CONTEXT_KEY,
)

ALERT_LEVELS = frozenset({"Error", "Fatal"})


class StructuredParser(LogParser):
    """Parser for one-object-per-line compact JSON logs."""

    def __init__(self):
        super().__init__("structured")

    @staticmethod
    def accepts(line: str) -> bool:
        return line.lstrip().startswith("{")

    def decode(self, line: str) -> Optional[Dict[str, Any]]:
        """
        Decode a line into a record.
        Returns None when the line is not a usable JSON object, so the
        caller can try another format.
        """
        try:
            record = json.loads(line)
        except ValueError:
            return None

        if not isinstance(record, dict):
            return None

        for key in KNOWN_KEYS:
            value = record.get(key)
            if value is not None and not isinstance(value, str):
                return None

        return record

    def to_event(self, record: Dict[str, Any]) -> Optional[LogEvent]:
        level = record.get(LEVEL_KEY) or DEFAULT_LEVEL
        exception = record.get(EXCEPTION_KEY) or ""

        if not exception and level not in ALERT_LEVELS:
            return None

        # A present @mt wins even when empty or null
        if MESSAGE_TEMPLATE_KEY in record:
            message = record[MESSAGE_TEMPLATE_KEY] or ""
        else:
            message = record.get(MESSAGE_KEY) or ""

        return LogEvent(
            source=record.get(SOURCE_CONTEXT_KEY) or UNKNOWN_SOURCE,
            level=level,
            message=message,
            stack_trace=exception,
            timestamp=parse_timestamp(record.get(TIMESTAMP_KEY)),
        )

    def parse(self, line: str) -> Optional[LogEvent]:
        if not self.accepts(line):
            return None
        record = self.decode(line)
        if record is None:
            return None
        return self.to_event(record)
