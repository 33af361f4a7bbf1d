"""data module"""

from .base import DbAdapter
from .memory import InMemoryAdapter
import logging

logger = logging.getLogger(__name__)


# Conditional imports - only import if dependencies are available
try:
    from .mongodb import MongoDBAdapter
except ImportError:
    logger.info("MongoDBAdapter not loaded - probably, missing dependencies")
    pass
