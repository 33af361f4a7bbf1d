"""
Account model
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .base_model import BaseModel


IDENTITY_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# Never leaves the store through account_summary().
PRIVATE_FIELDS = {
    'secret_hash',
    'google_id',
    'recovery_code_hash',
    'recovery_code_expiry',
    'recovery_attempts',
    'recovery_locked_until',
}


class AccountRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
    STUDENT = "student"


class RecoveryState(str, Enum):
    """Recovery state of an account, derived from its recovery fields."""
    NO_ACTIVE_CHALLENGE = "no-active-challenge"
    CHALLENGE_ISSUED = "challenge-issued"
    LOCKED = "locked"


def normalize_identity(identity: Optional[str]) -> str:
    """Identities are case-insensitive; they are stored stripped and lower-cased."""
    return (identity or "").strip().lower()


@dataclass(kw_only=True)
class Account(BaseModel):
    """A campus user account, as far as credential recovery is concerned."""

    identity: Optional[str] = None
    name: Optional[str] = None
    role: AccountRole = AccountRole.USER
    google_id: Optional[str] = None

    secret_hash: Optional[str] = None
    secret_established: bool = False
    last_secret_change: Optional[datetime] = None

    recovery_code_hash: Optional[str] = None
    recovery_code_expiry: Optional[datetime] = None
    recovery_attempts: int = 0
    recovery_locked_until: Optional[datetime] = None

    def validate_identity(self):
        if not self.identity or not IDENTITY_PATTERN.match(self.identity):
            return "Please enter a valid email address"
        if self.identity != normalize_identity(self.identity):
            return "Identity must be stored lower-cased and stripped"
        return None

    def validate_recovery_code_expiry(self):
        if self.recovery_code_hash and self.recovery_code_expiry is None:
            return "A recovery code hash requires a recovery code expiry"
        return None

    def is_recovery_locked(self, now: datetime) -> bool:
        return self.recovery_locked_until is not None and now < self.recovery_locked_until

    def has_active_challenge(self) -> bool:
        return self.recovery_code_hash is not None

    def recovery_state(self, now: datetime) -> RecoveryState:
        if self.is_recovery_locked(now):
            return RecoveryState.LOCKED
        if self.has_active_challenge():
            return RecoveryState.CHALLENGE_ISSUED
        return RecoveryState.NO_ACTIVE_CHALLENGE

    def lock_remaining_seconds(self, now: datetime) -> int:
        """Whole seconds until the recovery lock clears, rounded up."""
        if not self.is_recovery_locked(now):
            return 0
        remaining = (self.recovery_locked_until - now).total_seconds()
        return int(-(-remaining // 1))

    def is_code_expired(self, now: datetime) -> bool:
        return self.recovery_code_expiry is None or now > self.recovery_code_expiry

    def account_summary(self) -> Dict[str, Any]:
        """Public profile of the account, without credentials or recovery state."""
        data = self.as_dict(convert_datetime_to_iso_string=True)
        return {k: v for k, v in data.items() if k not in PRIVATE_FIELDS}
