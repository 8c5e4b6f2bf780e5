import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

DEFAULT_LEVEL = "Information"
UNKNOWN_SOURCE = "Unknown"

# .NET writes up to 7 fractional digits, datetime accepts 6
_FRACTION = re.compile(r"(\.\d{6})\d+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> datetime:
    """Best-effort ISO-8601 parse; falls back to the current UTC time."""
    if not value:
        return utcnow()

    text = _FRACTION.sub(r"\1", value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return utcnow()

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class LogEvent:
    source: str = UNKNOWN_SOURCE
    level: str = DEFAULT_LEVEL
    message: str = ""
    stack_trace: str = ""
    timestamp: datetime = field(default_factory=utcnow)

    def describe(self) -> str:
        """Short identity used in diagnostics."""
        return f"{self.level}/{self.source}@{self.timestamp.isoformat()}"


class LogParser(ABC):
    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def parse(self, line: str) -> Optional[LogEvent]:
        """Parse a log line into a structured event, or None if it does not match."""
        pass
