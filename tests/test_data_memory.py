"""
Tests for the in-memory database adapter.
"""
import threading
import unittest
from datetime import datetime, timedelta, timezone

from campus_recovery.data.base import DbAdapter
from campus_recovery.data.memory import InMemoryAdapter


# Test constants
TEST_TABLE = "account"
TEST_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)
TEST_LOCK_UNTIL = TEST_NOW + timedelta(minutes=30)


class InMemoryAdapterTestCase(unittest.TestCase):

    def setUp(self):
        self.adapter = InMemoryAdapter()
        self.adapter.save(TEST_TABLE, {
            'entity_id': 'e1',
            'identity': 'a@x.edu',
            'recovery_code_hash': 'h1',
            'recovery_attempts': 0,
            'recovery_locked_until': None,
        })

    def _increment(self, conditions=None, now=TEST_NOW, threshold=3):
        return self.adapter.increment_with_threshold(
            TEST_TABLE,
            conditions or {'entity_id': 'e1', 'recovery_code_hash': 'h1'},
            'recovery_attempts',
            threshold,
            'recovery_locked_until',
            TEST_LOCK_UNTIL,
            now
        )


class TestInMemoryAdapterBasics(InMemoryAdapterTestCase):

    def test_is_a_db_adapter(self):
        self.assertIsInstance(self.adapter, DbAdapter)
        with self.adapter as adapter:
            self.assertIs(adapter, self.adapter)

    def test_get_one_matches_all_conditions(self):
        self.assertEqual(self.adapter.get_one(TEST_TABLE, {'identity': 'a@x.edu'})['entity_id'], 'e1')
        self.assertIsNone(self.adapter.get_one(TEST_TABLE, {'identity': 'a@x.edu', 'entity_id': 'other'}))
        self.assertIsNone(self.adapter.get_one("missing_table", {}))

    def test_returned_documents_are_copies(self):
        """
        Test that mutating a returned document does not change the store.
        """
        doc = self.adapter.get_one(TEST_TABLE, {'entity_id': 'e1'})
        doc['identity'] = 'changed@x.edu'

        self.assertEqual(self.adapter.get_one(TEST_TABLE, {'entity_id': 'e1'})['identity'], 'a@x.edu')

    def test_save_requires_entity_id(self):
        with self.assertRaises(RuntimeError):
            self.adapter.save(TEST_TABLE, {'identity': 'b@x.edu'})

    def test_save_replaces_by_entity_id(self):
        self.adapter.save(TEST_TABLE, {'entity_id': 'e1', 'identity': 'a@x.edu', 'name': 'A'})

        doc = self.adapter.get_one(TEST_TABLE, {'entity_id': 'e1'})
        self.assertEqual(doc['name'], 'A')
        self.assertNotIn('recovery_code_hash', doc)

    def test_unique_index_is_enforced(self):
        self.adapter.create_index(TEST_TABLE, [('identity', 1)], 'identity_unique', unique=True)

        with self.assertRaises(RuntimeError):
            self.adapter.save(TEST_TABLE, {'entity_id': 'e2', 'identity': 'a@x.edu'})
        self.adapter.save(TEST_TABLE, {'entity_id': 'e2', 'identity': 'b@x.edu'})


class TestInMemoryConditionalUpdates(InMemoryAdapterTestCase):

    def test_update_one_applies_when_conditions_hold(self):
        updated = self.adapter.update_one(
            TEST_TABLE, {'entity_id': 'e1', 'recovery_code_hash': 'h1'}, {'recovery_code_hash': None})

        self.assertIsNone(updated['recovery_code_hash'])

    def test_update_one_skips_when_conditions_fail(self):
        """
        Test that a stale expected value leaves the document untouched.
        """
        updated = self.adapter.update_one(
            TEST_TABLE, {'entity_id': 'e1', 'recovery_code_hash': 'stale'}, {'recovery_code_hash': None})

        self.assertIsNone(updated)
        self.assertEqual(self.adapter.get_one(TEST_TABLE, {'entity_id': 'e1'})['recovery_code_hash'], 'h1')

    def test_increment_counts_and_locks_at_threshold(self):
        """
        Test the increment-with-threshold contract.

        Verifies:
        - counter increments by one per call
        - lock is set in the same write that reaches the threshold
        - further increments are refused while locked
        """
        self.assertIsNone(self._increment()['recovery_locked_until'])
        self.assertEqual(self._increment()['recovery_attempts'], 2)

        third = self._increment()
        self.assertEqual(third['recovery_attempts'], 3)
        self.assertEqual(third['recovery_locked_until'], TEST_LOCK_UNTIL)
        self.assertEqual(third['changed_on'], TEST_NOW)

        self.assertIsNone(self._increment())
        self.assertEqual(self.adapter.get_one(TEST_TABLE, {'entity_id': 'e1'})['recovery_attempts'], 3)

    def test_increment_allowed_after_lock_elapses(self):
        for _ in range(3):
            self._increment()

        after = self._increment(now=TEST_LOCK_UNTIL)

        self.assertEqual(after['recovery_attempts'], 1)
        self.assertIsNone(after['recovery_locked_until'])

    def test_elapsed_lock_needs_full_threshold_to_relock(self):
        """
        Test that once a lock elapses, a single failure cannot re-arm it.

        Verifies the count restarts and only `threshold` further failures lock again.
        """
        for _ in range(3):
            self._increment()
        later = TEST_LOCK_UNTIL + timedelta(minutes=1)

        self.assertIsNone(self._increment(now=later)['recovery_locked_until'])
        self.assertIsNone(self._increment(now=later)['recovery_locked_until'])
        relocked = self._increment(now=later)

        self.assertEqual(relocked['recovery_attempts'], 3)
        self.assertEqual(relocked['recovery_locked_until'], TEST_LOCK_UNTIL)

    def test_increment_skips_replaced_challenge(self):
        self.assertIsNone(self._increment({'entity_id': 'e1', 'recovery_code_hash': 'old'}))

    def test_concurrent_increments_are_not_lost(self):
        threshold = 1000
        threads = [
            threading.Thread(target=lambda: [self._increment(threshold=threshold) for _ in range(50)])
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        doc = self.adapter.get_one(TEST_TABLE, {'entity_id': 'e1'})
        self.assertEqual(doc['recovery_attempts'], 400)

    def test_create_index_returns_name(self):
        self.assertEqual(self.adapter.create_index(TEST_TABLE, ['identity'], 'by_identity'), 'by_identity')


if __name__ == '__main__':
    unittest.main()
