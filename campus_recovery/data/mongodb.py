from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union
from pymongo import MongoClient, ReturnDocument, errors
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from campus_recovery.data.base import DbAdapter


class MongoDBAdapter(DbAdapter):
    """
    MongoDB adapter for account documents:
      - Retryable writes enabled
      - Majority write concern
      - Configurable timeouts and pool sizes
      - Single-document atomic updates for attempt counting
    """

    def __init__(
        self,
        mongo_uri: str,
        mongo_database: str,
        **client_options: Any
    ):
        options = {
            'retryWrites': True,
            'w': 'majority',
            'serverSelectionTimeoutMS': 5000,
            'connectTimeoutMS': 5000,
            'maxPoolSize': 100,
            'tz_aware': True,
        }
        options.update(client_options)
        self.client: MongoClient = MongoClient(mongo_uri, **options)
        self.db_name: str = mongo_database
        self.db: Database = None

    def __enter__(self) -> 'MongoDBAdapter':
        """
        Verifies the connection with a ping and selects the database.

        Raises:
            ConnectionError: If the ping command fails.
        """
        try:
            self.client.admin.command('ping')
        except errors.PyMongoError as e:
            raise ConnectionError(f"MongoDB ping failed: {e}") from e

        self.db = self.client.get_database(self.db_name)
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        # The MongoClient is thread-safe and long-lived; application teardown closes it.
        pass

    def _get_collection(self, name: str, write: bool = False) -> Collection:
        """
        Get a MongoDB collection with a local read concern, and a majority
        write concern when `write` is True.
        """
        rc = ReadConcern('local')
        if write:
            return self.db.get_collection(name, read_concern=rc, write_concern=WriteConcern('majority'))
        return self.db.get_collection(name, read_concern=rc)

    def get_one(
        self,
        table: str,
        conditions: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Retrieve a single document matching `conditions`.

        Raises:
            RuntimeError: If the query fails due to a PyMongoError.
        """
        try:
            return self._get_collection(table).find_one(conditions)
        except errors.PyMongoError as e:
            raise RuntimeError(f"get_one failed: {e}") from e

    def save(
        self,
        table: str,
        data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Upsert the document keyed by `entity_id` and return the stored document.

        Raises:
            RuntimeError: If `entity_id` is missing or the write fails.
        """
        if 'entity_id' not in data:
            raise RuntimeError("save failed: 'entity_id' is required in data")

        try:
            doc = data.copy()
            doc.pop('_id', None)
            return self._get_collection(table, write=True).find_one_and_replace(
                {'entity_id': doc['entity_id']},
                doc,
                upsert=True,
                return_document=ReturnDocument.AFTER
            )
        except errors.PyMongoError as e:
            raise RuntimeError(f"save failed: {e}") from e

    def update_one(
        self,
        table: str,
        conditions: Dict[str, Any],
        values: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Set `values` on the document matching `conditions` in one atomic write.

        Raises:
            RuntimeError: If the write fails due to a PyMongoError.
        """
        try:
            return self._get_collection(table, write=True).find_one_and_update(
                conditions,
                {'$set': values},
                return_document=ReturnDocument.AFTER
            )
        except errors.PyMongoError as e:
            raise RuntimeError(f"update_one failed: {e}") from e

    def increment_with_threshold(
        self,
        table: str,
        conditions: Dict[str, Any],
        counter_field: str,
        threshold: int,
        lock_field: str,
        lock_until: datetime,
        now: datetime
    ) -> Optional[Dict[str, Any]]:
        """
        Increment `counter_field` and, on reaching `threshold`, set `lock_field`,
        using an update pipeline so both happen in a single document write.

        Documents whose `lock_field` is still in the future do not match; an
        elapsed `lock_field` restarts the count at 1.

        Raises:
            RuntimeError: If the write fails due to a PyMongoError.
        """
        query = dict(conditions)
        query['$or'] = [{lock_field: None}, {lock_field: {'$lte': now}}]
        counter_ref = f"${counter_field}"
        lock_ref = f"${lock_field}"
        lock_elapsed = {'$and': [
            {'$eq': [{'$type': lock_ref}, 'date']},
            {'$lte': [lock_ref, now]},
        ]}
        pipeline = [
            {'$set': {
                counter_field: {'$cond': [
                    lock_elapsed,
                    1,
                    {'$add': [{'$ifNull': [counter_ref, 0]}, 1]},
                ]},
                'changed_on': now,
            }},
            {'$set': {
                lock_field: {'$cond': [{'$gte': [counter_ref, threshold]}, lock_until, None]},
            }},
        ]
        try:
            return self._get_collection(table, write=True).find_one_and_update(
                query,
                pipeline,
                return_document=ReturnDocument.AFTER
            )
        except errors.PyMongoError as e:
            raise RuntimeError(f"increment_with_threshold failed: {e}") from e

    def create_index(
        self,
        table: str,
        columns: List[Union[str, Tuple[str, int]]],
        index_name: str,
        unique: bool = False
    ) -> str:
        """
        Create a MongoDB index on `columns`.

        Raises:
            RuntimeError: If the operation fails due to a PyMongoError.
        """
        try:
            coll = self._get_collection(table, write=True)
            return coll.create_index(columns, name=index_name, unique=unique)
        except errors.PyMongoError as e:
            raise RuntimeError(f"create_index failed: {e}") from e
