"""
In-Memory Adapter
=================
Process-local document store for development and testing.
Use MongoDBAdapter in production.
"""

import copy
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from campus_recovery.data.base import DbAdapter


class InMemoryAdapter(DbAdapter):
    """
    Stores documents per table in dicts keyed by entity_id.

    Every operation holds one lock, so conditional updates are atomic within
    the process.
    """

    def __init__(self):
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._indexes: Dict[str, List[Tuple[str, List[str]]]] = {}
        self._lock = threading.RLock()

    def __enter__(self) -> 'InMemoryAdapter':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        pass

    def _table(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._tables.setdefault(name, {})

    @staticmethod
    def _matches(doc: Dict[str, Any], conditions: Dict[str, Any]) -> bool:
        return all(doc.get(key) == value for key, value in conditions.items())

    def _find(self, table: str, conditions: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for doc in self._table(table).values():
            if self._matches(doc, conditions):
                return doc
        return None

    def _check_unique(self, table: str, data: Dict[str, Any]):
        for index_name, columns in self._indexes.get(table, []):
            key = {column: data.get(column) for column in columns}
            for doc in self._table(table).values():
                if doc['entity_id'] != data['entity_id'] and self._matches(doc, key):
                    raise RuntimeError(f"save failed: duplicate key for index {index_name}")

    def get_one(self, table: str, conditions: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._find(table, conditions)
            return copy.deepcopy(doc) if doc is not None else None

    def save(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        if 'entity_id' not in data:
            raise RuntimeError("save failed: 'entity_id' is required in data")
        with self._lock:
            self._check_unique(table, data)
            self._table(table)[data['entity_id']] = copy.deepcopy(data)
            return copy.deepcopy(data)

    def update_one(
        self,
        table: str,
        conditions: Dict[str, Any],
        values: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._find(table, conditions)
            if doc is None:
                return None
            doc.update(copy.deepcopy(values))
            return copy.deepcopy(doc)

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
        with self._lock:
            doc = self._find(table, conditions)
            if doc is None:
                return None
            locked_until = doc.get(lock_field)
            if locked_until is not None and locked_until > now:
                return None
            # An elapsed lock starts a fresh count.
            previous = 0 if locked_until is not None else (doc.get(counter_field) or 0)
            doc[counter_field] = previous + 1
            doc[lock_field] = lock_until if doc[counter_field] >= threshold else None
            doc['changed_on'] = now
            return copy.deepcopy(doc)

    def create_index(
        self,
        table: str,
        columns: List[Union[str, Tuple[str, int]]],
        index_name: str,
        unique: bool = False
    ) -> str:
        if unique:
            names = [column if isinstance(column, str) else column[0] for column in columns]
            with self._lock:
                self._indexes.setdefault(table, []).append((index_name, names))
        return index_name
