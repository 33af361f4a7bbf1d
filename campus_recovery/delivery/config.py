"""Config class"""
import json
import logging
import os.path
from typing import Any, Dict, List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Config(BaseSettings):
    """
    Delivery settings.

    Message templates (`events`) and the ordered list of transport attempts
    (`configurations`) are read from the JSON file at CONFIG_FILEPATH;
    credentials come from the environment.
    """
    CONFIG_FILEPATH: str

    events: Any = None
    configurations: Any = None

    model_config = SettingsConfigDict(extra='ignore')

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.read_config()

    def read_config(self):
        """Read delivery configuration file"""
        if not os.path.isfile(self.CONFIG_FILEPATH):
            raise OSError(f'Config.json file not found on specified path. {self.CONFIG_FILEPATH}')

        with open(self.CONFIG_FILEPATH, encoding='UTF-8') as config:
            config = json.load(config)
            self.events = config.get('events') or {}
            self.configurations = config.get('configurations') or []

        if not self.configurations:
            logger.warning("No delivery transports configured in %s", self.CONFIG_FILEPATH)
        for configuration in self.configurations:
            if 'provider' not in configuration:
                raise ValueError(f'Transport configuration without "provider": {configuration}')

    def get_event(self, event_name: str) -> Optional[Dict[str, Any]]:
        """Gets the event"""
        return self.events.get(event_name)

    def get_configurations(self) -> List[Dict[str, Any]]:
        """Transport configurations, in the order they are attempted"""
        return list(self.configurations)


class SmtpConfig(Config):
    """SMTP credential keys"""
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None


class MailjetConfig(Config):
    """Mailjet credential keys"""
    MAILJET_API_KEY: Optional[str] = None
    MAILJET_API_SECRET: Optional[str] = None
    MAILJET_API_VERSION: str = 'v3.1'


config_classes = [
    SmtpConfig,
    MailjetConfig
]


class DeliveryConfig(*config_classes):  # pylint: disable=R0903
    """DeliveryConfig"""
    pass  # pylint: disable=W0107
