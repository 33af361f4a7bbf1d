"""
base repository for campus_recovery
"""
from typing import Any, Dict, Optional, Type
from campus_recovery.data.base import DbAdapter
from campus_recovery.models.base_model import BaseModel


class BaseRepository:
    """
    BaseRepository class
    """

    def __init__(
        self,
        adapter: DbAdapter,
        model: Type[BaseModel]
    ):
        self.adapter = adapter
        self.model = model
        self.table_name = model.__name__.lower()

    def _execute_within_context(
        self,
        func,
        *args,
        **kwargs
    ):
        """Utility method to execute adapter methods within the context manager."""
        with self.adapter:
            return func(*args, **kwargs)

    def _process_data_before_save(
        self,
        instance: BaseModel
    ) -> Dict[str, Any]:
        """Convert a model instance to a data dictionary for the adapter."""
        instance.prepare_for_save()
        return instance.as_dict()

    def _to_model(self, data: Optional[Dict[str, Any]]) -> Optional[BaseModel]:
        if not data:
            return None
        return self.model.from_dict(data)

    def get_one(
        self,
        conditions: Dict[str, Any]
    ) -> Optional[BaseModel]:
        """
        Fetches a single active record based on given conditions.

        :param conditions: filter conditions
        :return: a model instance if found, None otherwise
        """
        db_conditions = dict(conditions)
        db_conditions.setdefault('active', True)
        data = self._execute_within_context(
            self.adapter.get_one,
            self.table_name,
            db_conditions
        )
        return self._to_model(data)

    def save(
        self,
        instance: BaseModel
    ) -> BaseModel:
        """
        Saves a model instance to the database.

        :param instance: The instance to save.
        :return: The saved instance.
        """
        data = self._process_data_before_save(instance)
        self._execute_within_context(self.adapter.save, self.table_name, data)
        return instance

    def update_where(
        self,
        conditions: Dict[str, Any],
        values: Dict[str, Any]
    ) -> Optional[BaseModel]:
        """
        Applies `values` to the record matching `conditions` as one atomic write.

        :return: the updated instance, or None when the conditions no longer hold
        """
        data = self._execute_within_context(
            self.adapter.update_one,
            self.table_name,
            conditions,
            values
        )
        return self._to_model(data)
