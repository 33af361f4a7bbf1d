from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import DeliveryConfig


@dataclass(frozen=True)
class RenderedMessage:
    """A message ready to be sent to one address."""
    subject: str
    text: str
    html: Optional[str] = None


@dataclass
class DeliveryResult:
    """Outcome of a delivery attempt."""
    success: bool
    transport: Optional[str] = None
    errors: List[str] = field(default_factory=list)


class Transport(ABC):
    """
        Base class for delivery transports
    """
    config: DeliveryConfig
    settings: Dict[str, Any]

    @abstractmethod
    def __init__(self):
        pass

    @abstractmethod
    def __call__(self, config: DeliveryConfig, settings: Dict[str, Any], *args, **kwargs):
        self.config = config
        self.settings = settings

    @property
    def name(self) -> str:
        """Label used in logs and delivery results"""
        return self.settings.get('name') or str(self.settings.get('provider'))

    @abstractmethod
    def send(self, identity: str, message: RenderedMessage) -> DeliveryResult:
        """
        Sends a message to identity.

        Transport-level failures are reported in the result, never raised.
        """
        raise NotImplementedError
