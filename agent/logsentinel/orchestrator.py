import asyncio
from typing import AsyncGenerator, Callable, Optional

from .alerts.dispatcher import CompositeDispatcher
from .analysis.base import AnalysisResult, Analyzer
from .parser.base import LogEvent
from .utils.logging import get_logger

logger = get_logger("orchestrator")

EventSource = Callable[[Optional[asyncio.Event]], AsyncGenerator[LogEvent, None]]


class Orchestrator:
    """Runs tail -> analyze -> dispatch, one event at a time, in arrival order."""

    def __init__(
        self,
        source: EventSource,
        analyzer: Analyzer,
        dispatcher: CompositeDispatcher,
        analyzer_timeout: Optional[float] = None,
    ):
        self.source = source
        self.analyzer = analyzer
        self.dispatcher = dispatcher
        self.analyzer_timeout = analyzer_timeout

        self.events_seen = 0
        self.alerts_dispatched = 0
        self.analysis_failures = 0

    async def run(self, stop: Optional[asyncio.Event] = None):
        """
        Consume events until the source ends or `stop` is set.
        TailSourceError from the source is not caught here.
        """
        stop = stop or asyncio.Event()
        events = self.source(stop)
        try:
            async for event in events:
                self.events_seen += 1
                await self.process(event)
                if stop.is_set():
                    break
        finally:
            await events.aclose()
            logger.info(
                f"Pipeline finished: {self.events_seen} events, "
                f"{self.alerts_dispatched} alerts, {self.analysis_failures} analysis failures"
            )

    async def process(self, event: LogEvent):
        result = await self._analyze(event)
        if result is None or not result.requires_alert:
            return

        await self.dispatcher.dispatch(event, result)
        self.alerts_dispatched += 1

    async def _analyze(self, event: LogEvent) -> Optional[AnalysisResult]:
        try:
            if self.analyzer_timeout is None:
                return await self.analyzer.analyze(event)
            return await asyncio.wait_for(self.analyzer.analyze(event), timeout=self.analyzer_timeout)
        except asyncio.TimeoutError:
            self.analysis_failures += 1
            logger.error(
                f"Analyzer {self.analyzer.name} timed out after {self.analyzer_timeout}s on {event.describe()}"
            )
        except Exception as e:
            self.analysis_failures += 1
            logger.error(f"Analyzer {self.analyzer.name} failed on {event.describe()}: {e}")
        return None
