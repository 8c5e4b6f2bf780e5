import asyncio
import smtplib
from email.message import EmailMessage
from typing import List, Optional

from ..analysis.base import AnalysisResult
from ..parser.base import LogEvent
from ..utils.logging import get_logger
from .base import AlertDeliveryError, AlertSink, format_alert_text

logger = get_logger("email_sink")


class EmailSink(AlertSink):
    """SMTP alert channel. smtplib is blocking, so sends run in a worker thread."""

    def __init__(
        self,
        host: str,
        sender: str,
        recipients: List[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        super().__init__("email")
        self.host = host
        self.port = port
        self.sender = sender
        self.recipients = list(recipients)
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, event: LogEvent, result: AnalysisResult) -> EmailMessage:
        msg = EmailMessage()
        # Header values may not contain line breaks
        subject = f"[{result.severity.upper()}] {event.level} in {event.source}: {event.message}"
        msg["Subject"] = " ".join(subject.split())[:200]
        msg["From"] = self.sender
        msg["To"] = ", ".join(self.recipients)
        msg.set_content(format_alert_text(event, result))
        return msg

    async def send(self, event: LogEvent, result: AnalysisResult) -> None:
        if not self.recipients:
            raise AlertDeliveryError("No email recipients configured")
        msg = self.build_message(event, result)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            raise AlertDeliveryError(f"SMTP delivery to {self.host}:{self.port} failed: {e}") from e
        logger.debug(f"Email sent to {msg['To']} for {event.describe()}")

    def _deliver(self, msg: EmailMessage):
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password or "")
            server.send_message(msg)
