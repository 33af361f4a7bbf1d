import logging
from typing import List

from .base import DeliveryResult, RenderedMessage, Transport

logger = logging.getLogger(__name__)


class DeliveryGateway:
    """
    Tries an ordered list of transports, one attempt each, and stops at the
    first that succeeds.
    """

    def __init__(self, transports: List[Transport]):
        self.transports = list(transports)

    def send(self, identity: str, message: RenderedMessage) -> DeliveryResult:
        errors: List[str] = []
        for position, transport in enumerate(self.transports):
            result = transport.send(identity, message)
            if result.success:
                if position:
                    logger.info("Delivered to %s through fallback transport %s", identity, transport.name)
                return DeliveryResult(success=True, transport=result.transport, errors=errors)
            errors.extend(result.errors or [f"{transport.name}: failed"])

        if not self.transports:
            errors.append("no transports configured")
        logger.error("All delivery transports failed for %s: %s", identity, "; ".join(errors))
        return DeliveryResult(success=False, errors=errors)
