import asyncio
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..analysis.base import AnalysisResult
from ..parser.base import LogEvent
from ..utils.logging import get_logger
from .base import AlertSink

logger = get_logger("alert_dispatcher")


@dataclass(frozen=True)
class SinkOutcome:
    sink: str
    delivered: bool
    error: Optional[str] = None
    elapsed: float = 0.0


class CompositeDispatcher:
    """
    Fans one alert out to every sink concurrently.

    A failing or slow sink never affects its siblings and nothing is raised
    to the caller; each sink's result comes back as a SinkOutcome. Retries
    are left to the sinks themselves.
    """

    def __init__(self, sinks: Iterable[AlertSink], sink_timeout: Optional[float] = None):
        self.sinks = tuple(sinks)
        self.sink_timeout = sink_timeout
        if not self.sinks:
            logger.warning("No alert sinks configured; alerts will only be logged")

    async def dispatch(self, event: LogEvent, result: AnalysisResult) -> List[SinkOutcome]:
        outcomes = await asyncio.gather(
            *(self._deliver(sink, event, result) for sink in self.sinks)
        )
        delivered = sum(1 for outcome in outcomes if outcome.delivered)
        logger.info(f"Alert for {event.describe()} delivered via {delivered}/{len(outcomes)} sinks")
        return list(outcomes)

    async def _deliver(self, sink: AlertSink, event: LogEvent, result: AnalysisResult) -> SinkOutcome:
        started = time.monotonic()
        try:
            if self.sink_timeout is None:
                await sink.send(event, result)
            else:
                await asyncio.wait_for(sink.send(event, result), timeout=self.sink_timeout)
        except asyncio.TimeoutError:
            error = f"timed out after {self.sink_timeout}s"
        except Exception as e:
            error = f"{e.__class__.__name__}: {e}"
        else:
            elapsed = time.monotonic() - started
            logger.info(f"Sink {sink.name} delivered alert for {event.describe()} in {elapsed:.2f}s")
            return SinkOutcome(sink=sink.name, delivered=True, elapsed=elapsed)

        elapsed = time.monotonic() - started
        logger.error(f"Sink {sink.name} failed for {event.describe()}: {error}")
        return SinkOutcome(sink=sink.name, delivered=False, error=error, elapsed=elapsed)

    async def close(self):
        for sink in self.sinks:
            try:
                await sink.close()
            except Exception as e:
                logger.warning(f"Error closing sink {sink.name}: {e}")
