from functools import lru_cache

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from campus_recovery.errors import (
    AccountLocked,
    ConcurrentUpdate,
    DeliveryFailed,
    InvalidCode,
    RecoveryError,
    WeakSecret,
)
from campus_recovery.recovery.factory import build_recovery_service
from campus_recovery.recovery.service import AccountRecoveryService

from .schemas import RecoveryRequest, RecoveryRequestResponse, RecoveryVerify, RecoveryVerifyResponse

router = APIRouter(prefix="/recovery", tags=["recovery"])


@lru_cache()
def get_recovery_service() -> AccountRecoveryService:
    """Service built once from the environment; tests override this dependency."""
    return build_recovery_service()


# Handlers are sync so they run in the threadpool; delivery blocks on SMTP.
@router.post("/request", response_model=RecoveryRequestResponse)
def request_code(body: RecoveryRequest, service: AccountRecoveryService = Depends(get_recovery_service)):
    service.request_code(body.identity)
    return RecoveryRequestResponse()


@router.post("/verify", response_model=RecoveryVerifyResponse, response_model_by_alias=True)
def verify_code(body: RecoveryVerify, service: AccountRecoveryService = Depends(get_recovery_service)):
    completed = service.verify_code(body.identity, body.code, body.new_secret)
    return RecoveryVerifyResponse(
        session_token=completed.session_token,
        expires_at=completed.expires_at,
        account_summary=completed.account_summary,
    )


def recovery_error_handler(request: Request, exc: RecoveryError) -> JSONResponse:
    """Map recovery errors to the HTTP bodies clients rely on."""
    if isinstance(exc, AccountLocked):
        content = {"error": exc.code, "detail": exc.message, "retryAfterSeconds": exc.retry_after_seconds}
        if exc.attempts_remaining is not None:
            content["attemptsRemaining"] = exc.attempts_remaining
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=content,
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )
    if isinstance(exc, InvalidCode):
        content = {"error": exc.code, "field": "code", "detail": exc.message}
        if exc.attempts_remaining is not None:
            content["attemptsRemaining"] = exc.attempts_remaining
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)
    if isinstance(exc, WeakSecret):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": exc.code, "field": "newSecret", "detail": exc.message, "errors": exc.errors},
        )
    if isinstance(exc, ConcurrentUpdate):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": exc.code, "detail": exc.message},
        )
    if isinstance(exc, DeliveryFailed):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": exc.code, "detail": exc.message},
        )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": exc.code, "detail": exc.message},
    )
