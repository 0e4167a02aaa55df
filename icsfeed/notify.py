import logging
import smtplib
from email.message import EmailMessage
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, recipient: str, payload: str) -> None:
        ...


class LoggingNotifier:
    """Writes notifications to the log instead of delivering them."""

    def send(self, recipient: str, payload: str) -> None:
        logger.info("Notification for %s:\n%s", recipient, payload)


class SMTPNotifier:
    """Delivers the run log by email."""

    def __init__(
        self,
        host: str,
        port: int = 25,
        sender: str = "ics-feed@localhost",
        subject: str = "ICS feed log",
        timeout_seconds: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.subject = subject
        self.timeout_seconds = timeout_seconds

    def send(self, recipient: str, payload: str) -> None:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = self.subject
        message.set_content(payload)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as smtp:
            smtp.send_message(message)


def create_notifier(smtp_host: Optional[str], smtp_port: int, sender: str) -> Notifier:
    if smtp_host:
        return SMTPNotifier(smtp_host, smtp_port, sender)
    return LoggingNotifier()
