from .config import Config, SmtpConfig, MailjetConfig, DeliveryConfig
from .base import Transport, RenderedMessage, DeliveryResult
from .smtp import SmtpTransport
from .mailjet import MailjetTransport
from .gateway import DeliveryGateway
from .templates import render_message
from .factory import transport_factory, TransportFactory
from .enums import TransportProvider, SmtpSecurity


__all__ = [
    'Config',
    'SmtpConfig',
    'MailjetConfig',
    'DeliveryConfig',
    'Transport',
    'RenderedMessage',
    'DeliveryResult',
    'SmtpTransport',
    'MailjetTransport',
    'DeliveryGateway',
    'render_message',
    'transport_factory',
    'TransportFactory',
    'TransportProvider',
    'SmtpSecurity',
]
