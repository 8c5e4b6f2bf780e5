from typing import Optional

from .base import DEFAULT_LEVEL, UNKNOWN_SOURCE, LogEvent, LogParser, parse_timestamp

DELIMITER = "|"
MIN_FIELDS = 5


class DelimitedParser(LogParser):
    """Legacy format: timestamp|level|source|message|detail"""

    def __init__(self, delimiter: str = DELIMITER):
        super().__init__("delimited")
        self.delimiter = delimiter

    def parse(self, line: str) -> Optional[LogEvent]:
        parts = [part.strip() for part in line.split(self.delimiter)]
        if len(parts) < MIN_FIELDS:
            return None

        # Fields past the fifth are ignored
        timestamp, level, source, message, detail = parts[:MIN_FIELDS]

        return LogEvent(
            source=source or UNKNOWN_SOURCE,
            level=level or DEFAULT_LEVEL,
            message=message,
            stack_trace=detail,
            timestamp=parse_timestamp(timestamp),
        )
