import asyncio
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict

import aiosmtplib

from .base import DeliveryResult, RenderedMessage, Transport
from .config import SmtpConfig
from .enums import SmtpSecurity


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10


class SmtpTransport(Transport):
    """
    Sends through an SMTP relay.

    Each configuration entry gives its own host, port and security mode, so a
    STARTTLS relay and an implicit-TLS relay can be chained in the gateway.
    """

    def __init__(self):
        pass

    def __call__(self, config: SmtpConfig, settings: Dict[str, Any], *args, **kwargs):
        super().__call__(config, settings)

        self.host = settings.get('host', 'localhost')
        self.port = int(settings.get('port', 587))
        self.security = SmtpSecurity(settings.get('security', SmtpSecurity.starttls))
        self.timeout = float(settings.get('timeoutSeconds', DEFAULT_TIMEOUT_SECONDS))
        self.source_email = settings.get('sourceEmail') or self.config.SMTP_USERNAME

        return self

    @property
    def name(self) -> str:
        return self.settings.get('name') or f"smtp:{self.host}:{self.port}"

    def _build_message(self, identity: str, message: RenderedMessage) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["From"] = self.source_email
        mime["To"] = identity
        mime["Subject"] = message.subject
        mime.attach(MIMEText(message.text, "plain"))
        if message.html:
            mime.attach(MIMEText(message.html, "html"))
        return mime

    def send(self, identity: str, message: RenderedMessage) -> DeliveryResult:
        mime = self._build_message(identity, message)
        try:
            asyncio.run(aiosmtplib.send(
                mime,
                hostname=self.host,
                port=self.port,
                username=self.config.SMTP_USERNAME,
                password=self.config.SMTP_PASSWORD,
                use_tls=self.security == SmtpSecurity.ssl,
                start_tls=self.security == SmtpSecurity.starttls,
                timeout=self.timeout,
            ))
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.warning("[%s] Failed to send message to %s: %s", self.name, identity, e)
            return DeliveryResult(success=False, transport=self.name, errors=[f"{self.name}: {e}"])

        logger.info("[%s] Message sent to %s", self.name, identity)
        return DeliveryResult(success=True, transport=self.name)
