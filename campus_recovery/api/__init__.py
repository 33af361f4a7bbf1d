from .app import create_app
from .router import router, get_recovery_service
