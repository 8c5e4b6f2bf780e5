import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional

from .alerts.base import AlertSink
from .alerts.console import ConsoleSink
from .alerts.dispatcher import CompositeDispatcher
from .alerts.smtp import EmailSink
from .alerts.webhook import WebhookSink
from .analysis.base import Analyzer
from .analysis.ollama import OllamaAnalyzer
from .analysis.rules import RuleAnalyzer
from .collector.tailer import LogTailer, TailSourceError
from .config.loader import load_config
from .config.schema import AnalysisConfig, AlertsConfig, SentinelConfig
from .orchestrator import Orchestrator
from .utils.logging import setup_logging, get_logger

__version__ = "0.1.0"

logger = get_logger("agent")


def build_analyzer(config: AnalysisConfig) -> Analyzer:
    if config.provider == "ollama":
        return OllamaAnalyzer(url=config.ollama.url, model=config.ollama.model)

    analyzer = RuleAnalyzer(config.rules_path)
    analyzer.load_rules()
    return analyzer


def build_sinks(config: AlertsConfig) -> List[AlertSink]:
    sinks: List[AlertSink] = []
    if config.console:
        sinks.append(ConsoleSink())
    if config.webhook:
        sinks.append(
            WebhookSink(
                config.webhook.url,
                max_retries=config.webhook.max_retries,
                retry_delay=config.webhook.retry_delay,
            )
        )
    if config.email:
        sinks.append(
            EmailSink(
                host=config.email.host,
                port=config.email.port,
                sender=config.email.sender,
                recipients=config.email.recipients,
                username=config.email.username,
                password=config.email.password,
                use_tls=config.email.use_tls,
            )
        )
    return sinks


class SentinelAgent:
    def __init__(self, config: Optional[SentinelConfig] = None, config_path: Optional[str] = None):
        self.config = config or load_config(Path(config_path) if config_path else None)

        self.tailer = LogTailer(self.config.watch.path, poll_interval=self.config.watch.poll_interval)
        self.analyzer = build_analyzer(self.config.analysis)
        self.dispatcher = CompositeDispatcher(
            build_sinks(self.config.alerts), sink_timeout=self.config.alerts.timeout
        )
        self.orchestrator = Orchestrator(
            self.tailer.stream,
            self.analyzer,
            self.dispatcher,
            analyzer_timeout=self.config.analysis.timeout,
        )
        self.stop_event = asyncio.Event()

    async def run(self):
        """Main service loop."""
        logger.info(f"Starting LogSentinel v{__version__}")
        logger.info(f"Analyzer: {self.analyzer.name}, sinks: {[s.name for s in self.dispatcher.sinks]}")

        try:
            await self.orchestrator.run(self.stop_event)
        except asyncio.CancelledError:
            logger.info("Agent stopping...")
        finally:
            await self.shutdown()

    def stop(self):
        self.stop_event.set()

    async def shutdown(self):
        self.stop_event.set()
        await self.dispatcher.close()
        await self.analyzer.close()
        logger.info("Agent stopped.")


def run_agent(config_path: Optional[str] = None) -> int:
    config = load_config(Path(config_path) if config_path else None)
    setup_logging(config.agent.log_level, Path(config.agent.log_file) if config.agent.log_file else None)

    return asyncio.run(_serve(config))


def main() -> int:
    return run_agent(sys.argv[1] if len(sys.argv) > 1 else None)


async def _serve(config: SentinelConfig) -> int:
    agent = SentinelAgent(config)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, agent.stop)

    try:
        await agent.run()
    except TailSourceError as e:
        logger.critical(f"Lost the log source: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
