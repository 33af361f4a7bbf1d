from typing import Any, Dict, Type

from .enums import TransportProvider
from .base import Transport
from .gateway import DeliveryGateway
from .smtp import SmtpTransport
from .mailjet import MailjetTransport
from .config import DeliveryConfig


class TransportFactory:
    def __init__(self):
        self._transports: Dict[str, Type[Transport]] = {}

    def register_transport(self, key: TransportProvider, transport: Type[Transport]):
        self._transports[key] = transport

    def _create(self, config: DeliveryConfig, settings: Dict[str, Any]) -> Transport:
        key = TransportProvider(settings['provider'])
        transport_class = self._transports.get(key)

        if not transport_class:
            raise ValueError(key)

        return transport_class()(config=config, settings=settings)

    def get_gateway(self, config: DeliveryConfig = None, **kwargs) -> DeliveryGateway:
        """Build a gateway with one transport per configuration entry, in file order."""
        config = config or DeliveryConfig(**kwargs)
        return DeliveryGateway([
            self._create(config, settings) for settings in config.get_configurations()
        ])


transport_factory = TransportFactory()

transport_factory.register_transport(key=TransportProvider.smtp, transport=SmtpTransport)
transport_factory.register_transport(key=TransportProvider.mailjet, transport=MailjetTransport)
