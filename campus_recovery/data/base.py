from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union


class DbAdapter(ABC):
    """Abstract base class for document-store adapters."""

    @abstractmethod
    def __enter__(self) -> 'DbAdapter':
        """Context manager entry point for preparing DB connection."""
        pass

    @abstractmethod
    def __exit__(self, exc_type, exc_value, traceback):
        """Context manager exit point for releasing DB resources."""
        pass

    @abstractmethod
    def get_one(self, table: str, conditions: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Fetches a single record from the specified table based on equality conditions."""
        pass

    @abstractmethod
    def save(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Inserts or replaces the record with data['entity_id'] and returns it."""
        pass

    @abstractmethod
    def update_one(
        self,
        table: str,
        conditions: Dict[str, Any],
        values: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Atomically sets `values` on the record matching `conditions`.

        Returns the updated record, or None when nothing matched.
        """
        pass

    @abstractmethod
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
        Atomically increments `counter_field` on the record matching `conditions`,
        unless `lock_field` holds a deadline later than `now`.

        A `lock_field` deadline at or before `now` restarts the counter, so the
        increment yields 1. When the incremented counter reaches `threshold`,
        `lock_field` is set to `lock_until` in the same operation; otherwise it
        is cleared.
        Returns the updated record, or None when nothing matched.
        """
        pass

    @abstractmethod
    def create_index(
        self,
        table: str,
        columns: List[Union[str, Tuple[str, int]]],
        index_name: str,
        unique: bool = False
    ) -> str:
        """Creates an index on the table and returns its name."""
        pass
