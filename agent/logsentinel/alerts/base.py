from abc import ABC, abstractmethod

from ..analysis.base import AnalysisResult
from ..parser.base import LogEvent


class AlertDeliveryError(Exception):
    """Raised by a sink when its channel did not accept the alert."""


class AlertSink(ABC):
    """One external alert channel."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def send(self, event: LogEvent, result: AnalysisResult) -> None:
        """Deliver the alert; raise on failure."""
        pass

    async def close(self):
        pass


def format_alert_text(event: LogEvent, result: AnalysisResult) -> str:
    """Plain-text alert body shared by text-based channels."""
    lines = [
        f"[{result.severity.upper()}] {event.level} in {event.source}",
        f"Time: {event.timestamp.isoformat()}",
        f"Message: {event.message}",
    ]
    if result.summary:
        lines.append(f"Analysis: {result.summary}")
    if result.suggested_fix:
        lines.append(f"Suggested fix: {result.suggested_fix}")
    if event.stack_trace:
        lines.extend(["", "Stack trace:", event.stack_trace])
    return "\n".join(lines)
