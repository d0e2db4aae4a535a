"""
Outbound email adapters

Notification code builds an EmailMessage and hands it to whichever provider
get_email_provider() selected: SMTP when a host is configured, otherwise a
provider that only logs.
"""
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    to: str
    subject: str
    html_body: str
    text_body: Optional[str] = None
    from_address: Optional[str] = None


class EmailProvider(ABC):
    """Delivery backend for ledger notifications"""

    @abstractmethod
    def send(self, message: EmailMessage) -> bool:
        """Deliver one message; return False when it was not delivered"""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backend has what it needs to deliver"""


class DevEmailProvider(EmailProvider):
    """Logs messages instead of delivering them (dev and test)"""

    def send(self, message: EmailMessage) -> bool:
        logger.info(f"[email not sent] to={message.to} subject={message.subject!r}")
        if message.text_body:
            logger.debug(message.text_body)
        return True

    def is_available(self) -> bool:
        return True


class SMTPEmailProvider(EmailProvider):
    """Delivers through an SMTP relay, with STARTTLS and login when configured"""

    def __init__(
        self,
        host: str,
        port: int,
        from_address: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: int = 10,
    ):
        self.host = host
        self.port = port
        self.from_address = from_address
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _build_mime(self, message: EmailMessage) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = message.from_address or self.from_address
        mime["To"] = message.to
        # The last alternative is the preferred rendering
        if message.text_body:
            mime.attach(MIMEText(message.text_body, "plain"))
        mime.attach(MIMEText(message.html_body, "html"))
        return mime

    def send(self, message: EmailMessage) -> bool:
        if not self.is_available():
            logger.warning(f"SMTP provider not configured, dropping email to {message.to}")
            return False

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(self._build_mime(message))
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery to {message.to} failed: {e}", exc_info=True)
            return False

        logger.info(f"Email delivered to {message.to}: {message.subject}")
        return True

    def is_available(self) -> bool:
        return bool(self.host and self.port and self.from_address)


_provider: Optional[EmailProvider] = None


def get_email_provider() -> EmailProvider:
    """Process-wide provider, chosen from config on first use"""
    global _provider

    if _provider is None:
        from ..config import config

        if config.smtp_configured:
            logger.info(f"Email provider: SMTP {config.SMTP_HOST}:{config.SMTP_PORT}")
            _provider = SMTPEmailProvider(
                host=config.SMTP_HOST,
                port=config.SMTP_PORT,
                from_address=config.EMAIL_FROM_ADDRESS,
                user=config.SMTP_USER,
                password=config.SMTP_PASSWORD,
                use_tls=config.SMTP_USE_TLS,
                timeout=config.SMTP_TIMEOUT,
            )
        else:
            logger.info("Email provider: log only (SMTP_HOST not set)")
            _provider = DevEmailProvider()

    return _provider
