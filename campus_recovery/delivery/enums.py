"""Transport provider enums"""
from enum import Enum


class TransportProvider(str, Enum):
    """Transport provider enum"""
    smtp = 'smtp'
    mailjet = 'mailjet'

    def __str__(self):
        return str(self.value)


class SmtpSecurity(str, Enum):
    """How an SMTP connection is secured"""
    starttls = 'starttls'
    ssl = 'ssl'
    none = 'none'

    def __str__(self):
        return str(self.value)
