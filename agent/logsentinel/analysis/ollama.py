import json
from typing import Optional

import httpx

from ..parser.base import LogEvent
from ..utils.logging import get_logger
from .base import SEVERITIES, AnalysisError, AnalysisResult, Analyzer

logger = get_logger("ollama_analyzer")

PROMPT_TEMPLATE = """You are an on-call engineer triaging an application error.
Reply with a JSON object with the keys:
  "requires_alert" (boolean), "severity" (one of low, medium, high, critical),
  "summary" (one sentence root cause), "suggested_fix" (one or two sentences).

Source: {source}
Level: {level}
Time: {timestamp}
Message: {message}
Stack trace:
{stack_trace}
"""


class OllamaAnalyzer(Analyzer):
    """
    Asks a local Ollama model for a verdict.

    Usage:
        analyzer = OllamaAnalyzer(url="http://localhost:11434", model="llama3")
        result = await analyzer.analyze(event)
    """

    def __init__(
        self,
        url: str = "http://localhost:11434",
        model: str = "llama3",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__("ollama")
        self.generate_url = f"{url.rstrip('/')}/api/generate"
        self.model = model
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def build_prompt(self, event: LogEvent) -> str:
        return PROMPT_TEMPLATE.format(
            source=event.source,
            level=event.level,
            timestamp=event.timestamp.isoformat(),
            message=event.message,
            stack_trace=event.stack_trace or "(none)",
        )

    async def analyze(self, event: LogEvent) -> AnalysisResult:
        payload = {
            "model": self.model,
            "prompt": self.build_prompt(event),
            "format": "json",
            "stream": False,
        }
        try:
            response = await self.client.post(self.generate_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise AnalysisError(f"Ollama request failed: {e}") from e

        if not isinstance(body, dict):
            raise AnalysisError("Unexpected Ollama response body")
        return self._to_result(body.get("response", ""))

    def _to_result(self, text: str) -> AnalysisResult:
        try:
            verdict = json.loads(text)
        except ValueError as e:
            raise AnalysisError(f"Model reply is not JSON: {text[:200]!r}") from e

        if not isinstance(verdict, dict) or "requires_alert" not in verdict:
            raise AnalysisError(f"Model reply lacks a verdict: {text[:200]!r}")

        severity = str(verdict.get("severity", "medium")).lower()
        if severity not in SEVERITIES:
            logger.debug(f"Unknown severity {severity!r} from model, using medium")
            severity = "medium"

        return AnalysisResult(
            requires_alert=bool(verdict["requires_alert"]),
            severity=severity,
            summary=str(verdict.get("summary", "")),
            suggested_fix=str(verdict.get("suggested_fix", "")),
            analyzer=f"{self.name}:{self.model}",
        )

    async def close(self):
        await self.client.aclose()
