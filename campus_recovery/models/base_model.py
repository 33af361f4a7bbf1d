import logging
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Union, get_args, get_origin, get_type_hints
from uuid import uuid4, UUID

from dateutil.parser import isoparse

logger = logging.getLogger(__name__)


def default_datetime():
    """
    Definition for default datetime
    """
    return datetime.now(timezone.utc)


def get_uuid_hex(_int=None):
    """
    Returns UUID in hex format. If _int is passed, it creates UUID with int base.
    """
    return uuid4().hex if _int is None else UUID(int=_int, version=4).hex


class ModelValidationError(Exception):
    """
    Exception raised when one or more validation errors occur in the model.

    Attributes:
        errors (list): A list of error messages returned from validation methods.
    """

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        elif not isinstance(errors, list):
            raise ValueError("Errors should be a string or a list of strings")
        self.errors = errors
        super().__init__(self.format_errors())

    def format_errors(self):
        return "\n".join(self.errors)

    def __str__(self):
        return self.format_errors()


@dataclass(kw_only=True)
class BaseModel:
    """
    A base dataclass for documents stored in place (upserted by entity_id).

    Accounts are mutated field by field with conditional updates, so they are
    not versioned: there is exactly one document per entity_id.
    """

    entity_id: str = field(default_factory=get_uuid_hex,
                           metadata={'field_type': 'entity_id'})
    active: bool = True
    changed_on: datetime = field(default_factory=default_datetime)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(entity_id={self.entity_id!r})"

    @classmethod
    def fields(cls) -> List[str]:
        """
        Get a list of field names for this model.
        """
        return [f.name for f in fields(cls)]

    def _convert_value(self, value, convert_datetime_to_iso_string: bool):
        """Helper to convert a single value for as_dict."""
        if is_dataclass(value) and hasattr(value, 'as_dict'):
            return value.as_dict(convert_datetime_to_iso_string)
        if isinstance(value, UUID):
            return value.hex
        if isinstance(value, datetime) and convert_datetime_to_iso_string:
            return value.isoformat()
        if isinstance(value, Enum):
            return value.value
        return value

    def as_dict(self, convert_datetime_to_iso_string: bool = False) -> Dict[str, Any]:
        """
        Convert this model to a dictionary.

        Args:
            convert_datetime_to_iso_string (bool, optional): Whether to convert datetime to ISO strings.

        Returns:
            Dict[str, Any]: A dictionary representation of this model.
        """
        return {
            f.name: self._convert_value(getattr(self, f.name), convert_datetime_to_iso_string)
            for f in fields(self)
        }

    @classmethod
    def _try_convert_datetime(cls, v: str) -> Any:
        """Try to convert a string to a datetime value."""
        try:
            return isoparse(v)
        except (ValueError, TypeError):
            return v

    @classmethod
    def _convert_string_value(cls, v, expected_type) -> Any:
        """Convert string values to enum or datetime types."""
        if not isinstance(v, str):
            return v

        candidates = get_args(expected_type) if get_origin(expected_type) is Union else (expected_type,)
        for candidate in candidates:
            if candidate is datetime:
                return cls._try_convert_datetime(v)
            if isinstance(candidate, type) and issubclass(candidate, Enum):
                try:
                    return candidate(v)
                except ValueError:
                    return v
        return v

    @staticmethod
    def _ensure_aware(v):
        # Mongo returns naive UTC datetimes unless the client is tz_aware.
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BaseModel":
        """
        Load model from dict. Unknown keys (such as Mongo's _id) are dropped.
        """
        hints = get_type_hints(cls)
        clean_data = {k: v for k, v in data.items() if k in cls.fields()}

        for k, v in clean_data.items():
            if v is None:
                continue
            expected_type = hints.get(k)
            if expected_type:
                clean_data[k] = cls._ensure_aware(cls._convert_string_value(v, expected_type))

        return cls(**clean_data)

    def _run_field_validator(self, name: str, errors: list):
        """Run custom field validator if defined."""
        validator = getattr(self, f"validate_{name}", None)
        if callable(validator):
            error = validator()
            if error:
                errors.append(error)

    def validate(self):
        """
        Validate all fields by calling corresponding `validate_<field_name>` methods if defined.
        Raise `ModelValidationError` if any validations fail.
        """
        errors = []
        for name in self.fields():
            self._run_field_validator(name, errors)

        if errors:
            raise ModelValidationError(errors)

    def prepare_for_save(self):
        """
        Prepare this model for saving to the database.
        """
        if not self.entity_id:
            self.entity_id = get_uuid_hex()
        self.changed_on = datetime.now(timezone.utc)
        self.validate()
