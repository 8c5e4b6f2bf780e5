from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..parser.base import LogEvent

SEVERITIES = ("low", "medium", "high", "critical")


class AnalysisError(Exception):
    """Raised when an analyzer cannot produce a verdict for an event."""


@dataclass(frozen=True)
class AnalysisResult:
    requires_alert: bool
    severity: str = "medium"
    summary: str = ""
    suggested_fix: str = ""
    analyzer: str = ""


class Analyzer(ABC):
    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def analyze(self, event: LogEvent) -> AnalysisResult:
        """Return a verdict for the event; raise AnalysisError on failure."""
        pass

    async def close(self):
        pass
