import logging
from functools import partial

from campus_recovery.config.config import RecoveryConfig
from campus_recovery.data.base import DbAdapter
from campus_recovery.delivery.config import DeliveryConfig
from campus_recovery.delivery.factory import transport_factory
from campus_recovery.delivery.gateway import DeliveryGateway
from campus_recovery.delivery.templates import render_message
from campus_recovery.repositories.account_repository import AccountRepository

from .challenges import build_challenge_sources
from .service import AccountRecoveryService

logger = logging.getLogger(__name__)


def build_recovery_service(
    config: RecoveryConfig = None,
    adapter: DbAdapter = None,
    delivery_config: DeliveryConfig = None,
    gateway: DeliveryGateway = None,
    clock=None
) -> AccountRecoveryService:
    """
    Wire the recovery service from the environment.

    Explicit collaborators take precedence over what the environment describes.

    Raises:
        ValueError: If the environment is invalid.
        ConfigurationError: If the development challenge store is enabled in production.
    """
    config = config or RecoveryConfig()
    config.validate_env_vars()
    settings = config.get_settings()

    if adapter is None:
        # Deferred so the in-memory store works without the mongo extra installed.
        from campus_recovery.data.mongodb import MongoDBAdapter
        adapter = MongoDBAdapter(settings.mongo_uri, settings.mongo_database)
    repository = AccountRepository(adapter)
    repository.ensure_indexes()

    delivery_config = delivery_config or DeliveryConfig()
    gateway = gateway or transport_factory.get_gateway(delivery_config)
    logger.info("Recovery delivery through %s", ", ".join(t.name for t in gateway.transports) or "nothing")

    return AccountRecoveryService(
        repository=repository,
        gateway=gateway,
        render=partial(render_message, delivery_config),
        settings=settings,
        clock=clock,
        challenge_sources=build_challenge_sources(settings),
    )
