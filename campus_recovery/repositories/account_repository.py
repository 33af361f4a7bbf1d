import logging
from datetime import datetime
from typing import Any, Dict, Optional

from campus_recovery.data.base import DbAdapter
from campus_recovery.models.account import Account, normalize_identity
from campus_recovery.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AccountRepository(BaseRepository):
    """Account store used by the recovery state machine."""

    def __init__(self, adapter: DbAdapter):
        super().__init__(adapter, Account)

    def ensure_indexes(self):
        """Create the unique identity index."""
        return self._execute_within_context(
            self.adapter.create_index,
            self.table_name,
            [('identity', 1)],
            'account_identity_unique',
            unique=True
        )

    def find_by_identity(self, identity: str) -> Optional[Account]:
        normalized = normalize_identity(identity)
        if not normalized:
            return None
        return self.get_one({'identity': normalized})

    def update_if_challenge(
        self,
        account: Account,
        expected_code_hash: str,
        values: Dict[str, Any]
    ) -> Optional[Account]:
        """
        Writes `values` only while the account still holds the challenge
        identified by `expected_code_hash` and its lock deadline is the one
        that was read.
        """
        return self.update_where(
            {
                'entity_id': account.entity_id,
                'recovery_code_hash': expected_code_hash,
                'recovery_locked_until': account.recovery_locked_until,
            },
            values
        )

    def update_if_unlocked(
        self,
        account: Account,
        values: Dict[str, Any]
    ) -> Optional[Account]:
        """
        Writes `values` only while the account's lock deadline is still the one
        that was read, so a lock set concurrently is never overwritten.
        """
        return self.update_where(
            {'entity_id': account.entity_id, 'recovery_locked_until': account.recovery_locked_until},
            values
        )

    def record_failed_attempt(
        self,
        account: Account,
        expected_code_hash: str,
        max_attempts: int,
        lock_until: datetime,
        now: datetime
    ) -> Optional[Account]:
        """
        Counts one failed verification against the challenge identified by
        `expected_code_hash`, locking the account when `max_attempts` is reached.

        Returns None when the account is locked or the challenge was replaced
        since it was read.
        """
        data = self._execute_within_context(
            self.adapter.increment_with_threshold,
            self.table_name,
            {'entity_id': account.entity_id, 'recovery_code_hash': expected_code_hash},
            'recovery_attempts',
            max_attempts,
            'recovery_locked_until',
            lock_until,
            now
        )
        if data is None:
            logger.info("Failed attempt for %s not counted: challenge changed or locked", account.identity)
        return self._to_model(data)
