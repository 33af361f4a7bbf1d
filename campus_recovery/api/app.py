from fastapi import FastAPI

from campus_recovery.errors import RecoveryError
from campus_recovery.recovery.service import AccountRecoveryService

from .router import get_recovery_service, recovery_error_handler, router


def create_app(service: AccountRecoveryService = None) -> FastAPI:
    """
    Build the recovery API.

    When `service` is given it replaces the one built from the environment.
    """
    app = FastAPI(title="Campus account recovery")
    app.include_router(router)
    app.add_exception_handler(RecoveryError, recovery_error_handler)
    if service is not None:
        app.dependency_overrides[get_recovery_service] = lambda: service
    return app
