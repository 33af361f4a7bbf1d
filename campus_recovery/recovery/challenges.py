"""
Sources a submitted recovery code is checked against.

The persisted source checks the bcrypt hash stored on the account. The
development store keeps plaintext codes in process memory so recovery can be
exercised while outbound delivery is not configured; it is only ever built
when RECOVERY_DEV_BYPASS is on outside production.
"""
import hmac
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Tuple

from campus_recovery.config.config import RecoverySettings
from campus_recovery.errors import ConfigurationError
from campus_recovery.models.account import Account, normalize_identity
from campus_recovery.security.hashing import verify_secret

logger = logging.getLogger(__name__)


class ChallengeSource(ABC):
    """A place an issued code can be matched against."""

    @abstractmethod
    def remember(self, identity: str, code: str, expiry: datetime):
        """Called after a code is issued to identity."""
        raise NotImplementedError

    @abstractmethod
    def matches(self, account: Account, code: str, now: datetime) -> bool:
        """Whether code is the outstanding code of account."""
        raise NotImplementedError

    @abstractmethod
    def forget(self, identity: str):
        """Called when the outstanding code is consumed or rolled back."""
        raise NotImplementedError


class PersistedChallengeSource(ChallengeSource):
    """Matches against account.recovery_code_hash."""

    def remember(self, identity: str, code: str, expiry: datetime):
        pass

    def matches(self, account: Account, code: str, now: datetime) -> bool:
        return verify_secret(code, account.recovery_code_hash)

    def forget(self, identity: str):
        pass


class DevelopmentChallengeStore(ChallengeSource):
    """
    Process-local plaintext codes, for non-production use only.

    Entries are replaced by a newer issuance and deleted once matched; they do
    not survive a restart and are not shared between processes.
    """

    def __init__(self):
        self._challenges: Dict[str, Tuple[str, datetime]] = {}
        self._lock = threading.Lock()

    def remember(self, identity: str, code: str, expiry: datetime):
        with self._lock:
            self._challenges[normalize_identity(identity)] = (code, expiry)

    def matches(self, account: Account, code: str, now: datetime) -> bool:
        with self._lock:
            challenge = self._challenges.get(normalize_identity(account.identity))
        if challenge is None or not code:
            return False
        stored_code, expiry = challenge
        if now > expiry:
            return False
        return hmac.compare_digest(stored_code.encode('utf-8'), code.encode('utf-8'))

    def forget(self, identity: str):
        with self._lock:
            self._challenges.pop(normalize_identity(identity), None)

    def peek(self, identity: str):
        """Outstanding plaintext code for identity, or None. Development tooling only."""
        with self._lock:
            challenge = self._challenges.get(normalize_identity(identity))
        return challenge[0] if challenge else None


def build_challenge_sources(settings: RecoverySettings) -> List[ChallengeSource]:
    """
    Challenge sources in the order they are consulted.

    Raises:
        ConfigurationError: If the development store is requested in production.
    """
    sources: List[ChallengeSource] = []
    if settings.dev_bypass:
        if settings.is_production:
            raise ConfigurationError("The development challenge store cannot be enabled in production")
        logger.warning("Development challenge store enabled: recovery codes are kept in memory")
        sources.append(DevelopmentChallengeStore())
    sources.append(PersistedChallengeSource())
    return sources
