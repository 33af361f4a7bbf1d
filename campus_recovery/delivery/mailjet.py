import re
import logging
from typing import Any, Dict

import requests
from mailjet_rest import Client

from .base import DeliveryResult, RenderedMessage, Transport
from .config import MailjetConfig


logger = logging.getLogger(__name__)


class MailjetTransport(Transport):

    def __init__(self):
        pass

    @staticmethod
    def _parse_source_email(source_email: str) -> Dict[str, str]:
        """Split "Name <email>" into Mailjet's From format."""
        match = re.match(r'^(.*)<(.*)>$', source_email or "")
        if not match:
            return {"Email": (source_email or "").strip()}
        name, email = match.groups()
        return {"Name": name.strip(), "Email": email.strip()}

    def __call__(self, config: MailjetConfig, settings: Dict[str, Any], *args, **kwargs):
        super().__call__(config, settings)

        self.from_address = self._parse_source_email(settings.get('sourceEmail'))
        self.client = Client(
            auth=(self.config.MAILJET_API_KEY, self.config.MAILJET_API_SECRET),
            version=settings.get('apiVersion') or self.config.MAILJET_API_VERSION
        )

        return self

    def send(self, identity: str, message: RenderedMessage) -> DeliveryResult:
        payload = {
            "From": self.from_address,
            "To": [{"Email": identity}],
            "Subject": message.subject,
            "TextPart": message.text,
        }
        if message.html:
            payload["HTMLPart"] = message.html

        try:
            result = self.client.send.create(data={'Messages': [payload]})
        except requests.RequestException as e:
            logger.warning("[%s] Failed to send message to %s: %s", self.name, identity, e)
            return DeliveryResult(success=False, transport=self.name, errors=[f"{self.name}: {e}"])

        if result.status_code != 200:
            logger.warning("[%s] Mailjet rejected message to %s with status %s",
                           self.name, identity, result.status_code)
            return DeliveryResult(
                success=False,
                transport=self.name,
                errors=[f"{self.name}: status {result.status_code}"]
            )

        logger.info("[%s] Message sent to %s", self.name, identity)
        return DeliveryResult(success=True, transport=self.name)
