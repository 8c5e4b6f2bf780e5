from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..analysis.base import AnalysisResult
from ..parser.base import LogEvent
from .base import AlertSink, format_alert_text

SEVERITY_STYLES = {
    "low": "green",
    "medium": "yellow",
    "high": "red",
    "critical": "bold red",
}


class ConsoleSink(AlertSink):
    """Prints alerts to the terminal. Meant for local runs and demos."""

    def __init__(self, console: Optional[Console] = None):
        super().__init__("console")
        self.console = console or Console(stderr=True)

    async def send(self, event: LogEvent, result: AnalysisResult) -> None:
        style = SEVERITY_STYLES.get(result.severity, "yellow")
        self.console.print(
            Panel(
                Text(format_alert_text(event, result)),
                title=f"ALERT {result.severity.upper()}",
                border_style=style,
            )
        )
