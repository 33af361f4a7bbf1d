"""
Credential recovery through one-time codes.

States per account, derived by Account.recovery_state():

    NO_ACTIVE_CHALLENGE --request_code--> CHALLENGE_ISSUED
    CHALLENGE_ISSUED --request_code--> CHALLENGE_ISSUED (new code replaces the old one)
    CHALLENGE_ISSUED --verify_code ok--> NO_ACTIVE_CHALLENGE
    CHALLENGE_ISSUED --max_attempts failures--> LOCKED
    LOCKED --lock deadline passes--> previous state, observed on the next call

Every write that depends on what was read is a conditional update in the
account store, so concurrent requests cannot double-spend a code or lose a
failed attempt.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from campus_recovery.auth.tokens import generate_access_token
from campus_recovery.config.config import RecoverySettings
from campus_recovery.delivery.base import RenderedMessage
from campus_recovery.delivery.gateway import DeliveryGateway
from campus_recovery.errors import AccountLocked, ConcurrentUpdate, DeliveryFailed, InvalidCode
from campus_recovery.models.account import Account, normalize_identity
from campus_recovery.repositories.account_repository import AccountRepository
from campus_recovery.security.codes import generate_code
from campus_recovery.security.hashing import hash_secret
from campus_recovery.security.policy import check_secret

from .challenges import ChallengeSource, PersistedChallengeSource
from .clock import SystemClock

logger = logging.getLogger(__name__)

RECOVERY_EVENT = 'password_recovery'
# Rounds of re-reading the account when a conditional issuance write loses a race.
ISSUE_ATTEMPTS = 2


@dataclass(frozen=True)
class RecoveryRequestAccepted:
    """Returned for every accepted request, whether or not the identity exists."""
    accepted: bool = True


@dataclass(frozen=True)
class RecoveryCompleted:
    session_token: str
    expires_at: datetime
    account_summary: Dict[str, Any] = field(default_factory=dict)


class AccountRecoveryService:
    """Issues and verifies one-time recovery codes."""

    def __init__(
        self,
        repository: AccountRepository,
        gateway: DeliveryGateway,
        render: Callable[[str, Dict[str, Any]], RenderedMessage],
        settings: RecoverySettings = None,
        clock=None,
        challenge_sources: Optional[List[ChallengeSource]] = None
    ):
        self.repository = repository
        self.gateway = gateway
        self.render = render
        self.settings = settings or RecoverySettings()
        self.clock = clock or SystemClock()
        self.challenge_sources = challenge_sources or [PersistedChallengeSource()]

    def request_code(self, identity: str) -> RecoveryRequestAccepted:
        """
        Issue a fresh code to identity and deliver it.

        Unknown identities get the same answer as known ones and nothing is sent.

        Raises:
            AccountLocked: If the account is locked; carries the remaining wait.
            DeliveryFailed: If every transport failed; the issued code was rolled back.
            ConcurrentUpdate: If the account changed under every issuance attempt; nothing was sent.
        """
        identity = normalize_identity(identity)
        for _ in range(ISSUE_ATTEMPTS):
            now = self.clock.now()
            account = self.repository.find_by_identity(identity)
            if account is None:
                logger.info("Recovery requested for unknown identity %s", identity)
                return RecoveryRequestAccepted()
            if account.is_recovery_locked(now):
                logger.info("Recovery request refused for %s: locked", identity)
                raise AccountLocked(account.lock_remaining_seconds(now), attempts_remaining=0)

            issued = self._issue(account, now)
            if issued is not None:
                return issued

        logger.warning("Recovery request for %s kept losing concurrent updates", identity)
        raise ConcurrentUpdate()

    def _issue(self, account: Account, now: datetime) -> Optional[RecoveryRequestAccepted]:
        code = generate_code(self.settings.code_length)
        expiry = now + timedelta(seconds=self.settings.code_ttl_seconds)
        message = self.render(RECOVERY_EVENT, {
            'name': account.name,
            'identity': account.identity,
            'code': code,
            'ttl_minutes': self.settings.code_ttl_seconds // 60,
        })

        code_hash = hash_secret(code, rounds=self.settings.bcrypt_rounds)
        issued = self.repository.update_if_unlocked(account, {
            'recovery_code_hash': code_hash,
            'recovery_code_expiry': expiry,
            'recovery_attempts': 0,
            'recovery_locked_until': None,
            'changed_on': now,
        })
        if issued is None:
            return None
        for source in self.challenge_sources:
            source.remember(issued.identity, code, expiry)
        logger.info("Recovery code issued for %s, valid until %s", issued.identity, expiry.isoformat())

        result = self.gateway.send(issued.identity, message)
        if not result.success:
            self._roll_back(issued, code_hash)
            raise DeliveryFailed(result.errors)
        return RecoveryRequestAccepted()

    def _roll_back(self, account: Account, code_hash: str):
        rolled_back = self.repository.update_if_challenge(account, code_hash, {
            'recovery_code_hash': None,
            'recovery_code_expiry': None,
            'recovery_attempts': 0,
        })
        if rolled_back is None:
            # The newer code owns the challenge sources now.
            logger.info("Recovery code for %s was replaced before rollback", account.identity)
            return
        self._forget(account.identity)
        logger.info("Recovery code for %s rolled back after delivery failure", account.identity)

    def _forget(self, identity: str):
        for source in self.challenge_sources:
            source.forget(identity)

    def _matches(self, account: Account, code: str, now: datetime) -> bool:
        return any(source.matches(account, code, now) for source in self.challenge_sources)

    def _register_failure(self, account: Account, code_hash: str, now: datetime, reason: str):
        lock_until = now + timedelta(seconds=self.settings.lock_seconds)
        updated = self.repository.record_failed_attempt(
            account, code_hash, self.settings.max_attempts, lock_until, now
        )
        if updated is None:
            current = self.repository.find_by_identity(account.identity)
            if current is not None and current.is_recovery_locked(now):
                raise AccountLocked(current.lock_remaining_seconds(now), attempts_remaining=0)
            raise InvalidCode()

        if updated.is_recovery_locked(now):
            logger.warning("Recovery locked for %s after %s failed attempts (reason=%s)",
                           account.identity, updated.recovery_attempts, reason)
            raise AccountLocked(updated.lock_remaining_seconds(now), attempts_remaining=0)

        remaining = max(self.settings.max_attempts - updated.recovery_attempts, 0)
        logger.warning("Failed recovery verification for %s (reason=%s, attempts=%s)",
                       account.identity, reason, updated.recovery_attempts)
        raise InvalidCode(attempts_remaining=remaining)

    def verify_code(self, identity: str, code: str, new_secret: str) -> RecoveryCompleted:
        """
        Check code and, when it is the outstanding one, replace the login secret.

        Raises:
            InvalidCode: Unknown account, no outstanding code, expired or wrong code.
            AccountLocked: The account is locked, or this failure locked it.
            WeakSecret: The code matched but new_secret is too weak; nothing was changed.
        """
        now = self.clock.now()
        code = (code or '').strip()
        account = self.repository.find_by_identity(identity)
        if account is None:
            logger.info("Recovery verification for unknown identity %s", normalize_identity(identity))
            raise InvalidCode()
        if account.is_recovery_locked(now):
            raise AccountLocked(account.lock_remaining_seconds(now), attempts_remaining=0)
        if not account.has_active_challenge():
            raise InvalidCode()

        code_hash = account.recovery_code_hash
        if account.is_code_expired(now):
            self._register_failure(account, code_hash, now, reason='expired')
        if not self._matches(account, code, now):
            self._register_failure(account, code_hash, now, reason='mismatch')

        check_secret(new_secret)

        completed = self.repository.update_if_challenge(account, code_hash, {
            'secret_hash': hash_secret(new_secret, rounds=self.settings.bcrypt_rounds),
            'secret_established': True,
            'last_secret_change': now,
            'recovery_code_hash': None,
            'recovery_code_expiry': None,
            'recovery_attempts': 0,
            'recovery_locked_until': None,
            'changed_on': now,
        })
        if completed is None:
            current = self.repository.find_by_identity(account.identity)
            if current is not None and current.is_recovery_locked(now):
                raise AccountLocked(current.lock_remaining_seconds(now), attempts_remaining=0)
            raise InvalidCode()
        self._forget(completed.identity)

        token, expires = generate_access_token(
            completed.entity_id,
            self.settings.secret_key,
            self.settings.session_ttl_seconds,
            issued_at=int(now.timestamp())
        )
        logger.info("Password reset through recovery code for %s", completed.identity)
        return RecoveryCompleted(
            session_token=token,
            expires_at=datetime.fromtimestamp(expires, tz=timezone.utc),
            account_summary=completed.account_summary()
        )
