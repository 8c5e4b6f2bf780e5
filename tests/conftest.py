import asyncio
from datetime import datetime, timezone

import pytest

from agent.logsentinel.alerts.base import AlertDeliveryError, AlertSink
from agent.logsentinel.analysis.base import AnalysisResult, Analyzer
from agent.logsentinel.parser.base import LogEvent


class RecordingSink(AlertSink):
    def __init__(self, name="recording", delay=0.0):
        super().__init__(name)
        self.delay = delay
        self.received = []
        self.closed = False

    async def send(self, event, result):
        if self.delay:
            await asyncio.sleep(self.delay)
        self.received.append((event, result))

    async def close(self):
        self.closed = True


class FailingSink(AlertSink):
    def __init__(self, name="failing"):
        super().__init__(name)
        self.attempts = 0

    async def send(self, event, result):
        self.attempts += 1
        raise AlertDeliveryError("webhook timed out")


class StubAnalyzer(Analyzer):
    """Alerts on everything except messages listed in `quiet`; raises on `broken`."""

    def __init__(self, quiet=(), broken=(), delay=0.0):
        super().__init__("stub")
        self.quiet = set(quiet)
        self.broken = set(broken)
        self.delay = delay
        self.seen = []

    async def analyze(self, event):
        self.seen.append(event.message)
        if self.delay:
            await asyncio.sleep(self.delay)
        if event.message in self.broken:
            raise RuntimeError("model unavailable")
        return AnalysisResult(
            requires_alert=event.message not in self.quiet,
            severity="high",
            summary=f"analysis of {event.message}",
            analyzer=self.name,
        )


@pytest.fixture
def event():
    return LogEvent(
        source="PaymentService",
        level="Fatal",
        message="Crash",
        stack_trace="at line 10",
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def result():
    return AnalysisResult(
        requires_alert=True,
        severity="critical",
        summary="Payment worker crashed",
        suggested_fix="Restart the worker",
        analyzer="stub",
    )
