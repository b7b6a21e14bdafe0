"""
Generic data insertion mixin for SQLAlchemy models
Provides from_dict, to_dict and apply_patch for the API and managers

Handles:
- Building model instances from validated payload dictionaries
- JSON-safe serialisation (datetimes as ISO strings, money as floats)
- Partial updates restricted to an allow-list of columns
"""

from datetime import datetime
from decimal import Decimal
import enum
from sqlalchemy import inspect


class DataInsertionMixin:
    """
    Mixin that provides generic data insertion capabilities for SQLAlchemy models

    This mixin adds:
    - from_dict(): Create model instance from dictionary
    - to_dict(): Convert model instance to dictionary
    - apply_patch(): Partial update from dictionary
    """

    # Columns never serialised
    hidden_fields = ()

    @classmethod
    def from_dict(cls, data_dict, skip_fields=None):
        """
        Create a model instance from a dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            skip_fields (list, optional): Fields to skip during creation

        Returns:
            Model instance (not added to the session)
        """
        if skip_fields is None:
            skip_fields = []

        mapper = inspect(cls)
        columns = {c.key for c in mapper.columns}

        filtered_data = {}
        for key, value in data_dict.items():
            if key in columns and key not in skip_fields:
                if key in ['created_at'] and value is None:
                    continue
                filtered_data[key] = value

        return cls(**filtered_data)

    def to_dict(self, exclude=()):
        """
        Convert model instance to dictionary

        Args:
            exclude (iterable): Extra column names to leave out

        Returns:
            dict: JSON-safe representation of the model
        """
        result = {}
        skipped = set(self.hidden_fields) | set(exclude)

        for column in inspect(self.__class__).columns:
            if column.key in skipped:
                continue
            result[column.key] = _json_value(getattr(self, column.key))

        return result

    def apply_patch(self, patch, allowed_fields):
        """
        Set the allowed columns present in ``patch``; everything else is left unchanged.

        Returns:
            list: Names of the fields that were set
        """
        changed = []
        for key in allowed_fields:
            if key in patch:
                setattr(self, key, patch[key])
                changed.append(key)
        return changed


def _json_value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, list):
        return [_json_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _json_value(item) for key, item in value.items()}
    return value
