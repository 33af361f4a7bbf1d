"""
Errors raised by the credential-recovery flow.

Each error carries a short machine-readable `code` used at the HTTP boundary.
"""
from typing import List, Optional


class RecoveryError(Exception):
    """Base class for recovery failures."""

    code = "recovery_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidCode(RecoveryError):
    """
    The submitted code cannot be accepted.

    Mismatch, expiry, unknown account and missing challenge all surface as this
    one error so callers cannot tell which check failed.
    """

    code = "invalid_code"

    def __init__(self, attempts_remaining: Optional[int] = None):
        self.attempts_remaining = attempts_remaining
        super().__init__("Invalid or expired code")


class AccountLocked(RecoveryError):
    """Recovery is refused until the lock elapses."""

    code = "locked"

    def __init__(self, retry_after_seconds: int, attempts_remaining: Optional[int] = None):
        self.retry_after_seconds = retry_after_seconds
        self.attempts_remaining = attempts_remaining
        super().__init__(
            f"Too many failed attempts. Try again in {retry_after_seconds} seconds"
        )


class WeakSecret(RecoveryError):
    """The new login secret violates the strength policy."""

    code = "weak_secret"

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class DeliveryFailed(RecoveryError):
    """Every delivery transport failed; the issued challenge was rolled back."""

    code = "delivery_failed"

    def __init__(self, transport_errors: Optional[List[str]] = None):
        self.transport_errors = transport_errors or []
        super().__init__("Could not deliver the recovery code. Please try again later")


class ConcurrentUpdate(RecoveryError):
    """The account kept changing while a code was being issued; nothing was sent."""

    code = "concurrent_update"

    def __init__(self):
        super().__init__("The account changed while the request was processed. Please try again")


class ConfigurationError(Exception):
    """Raised when the recovery components are wired inconsistently."""
