"""
Webhook alert channel.

Posts a Discord-compatible payload (plain content plus one embed). Slack and
most chat bridges accept the `content` field as well.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx

from ..analysis.base import AnalysisResult
from ..parser.base import LogEvent
from ..utils.logging import get_logger
from .base import AlertDeliveryError, AlertSink

logger = get_logger("webhook_sink")

SEVERITY_COLORS = {
    "low": 0x3498DB,
    "medium": 0xF1C40F,
    "high": 0xE67E22,
    "critical": 0xE74C3C,
}

# Discord rejects embed fields longer than this
FIELD_LIMIT = 1024


def _clip(text: str, limit: int = FIELD_LIMIT) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


class WebhookSink(AlertSink):
    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        username: str = "LogSentinel",
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__("webhook")
        self.url = url
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.username = username
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def build_payload(self, event: LogEvent, result: AnalysisResult) -> Dict[str, Any]:
        fields = [
            {"name": "Source", "value": event.source, "inline": True},
            {"name": "Level", "value": event.level, "inline": True},
            {"name": "Severity", "value": result.severity, "inline": True},
        ]
        if result.suggested_fix:
            fields.append({"name": "Suggested fix", "value": _clip(result.suggested_fix)})
        if event.stack_trace:
            fields.append({"name": "Stack trace", "value": _clip(f"```{event.stack_trace}```")})

        return {
            "username": self.username,
            "content": f"{result.severity.upper()}: {event.message}"[:2000],
            "embeds": [
                {
                    "title": _clip(event.message or f"{event.level} in {event.source}", 256),
                    "description": _clip(result.summary, 4096),
                    "color": SEVERITY_COLORS.get(result.severity, SEVERITY_COLORS["medium"]),
                    "timestamp": event.timestamp.isoformat(),
                    "fields": fields,
                }
            ],
        }

    async def send(self, event: LogEvent, result: AnalysisResult) -> None:
        payload = self.build_payload(event, result)

        for attempt in range(self.max_retries):
            try:
                response = await self.client.post(self.url, json=payload)
                if response.is_success:
                    logger.debug(f"Webhook accepted alert for {event.describe()}")
                    return
                logger.warning(
                    f"Webhook returned status {response.status_code}: {response.text[:200]}"
                )
                last_error = f"status {response.status_code}"
            except httpx.HTTPError as e:
                logger.warning(f"Webhook attempt {attempt + 1} failed: {e}")
                last_error = str(e) or e.__class__.__name__

            if attempt < self.max_retries - 1:
                # Exponential backoff
                await asyncio.sleep(self.retry_delay * (2**attempt))

        raise AlertDeliveryError(
            f"Webhook delivery failed after {self.max_retries} attempts ({last_error})"
        )

    async def close(self):
        await self.client.aclose()
