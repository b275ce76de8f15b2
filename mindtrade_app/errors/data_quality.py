"""
Data quality error classifications for backend records.

These exceptions categorize problems found while mapping API responses
into client records.
"""

from typing import Optional, Dict, Any


class DataQualityError(Exception):
    """Base class for record mapping issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MissingFieldError(DataQualityError):
    """A required field is absent from an API record."""

    def __init__(self, message: str, record_type: Optional[str] = None,
                 missing_fields: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.record_type = record_type
        self.missing_fields = missing_fields or []


class MalformedRecordError(DataQualityError):
    """A field exists but is in an incorrect format."""

    def __init__(self, message: str, field: Optional[str] = None,
                 raw_value: Optional[Any] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.raw_value = raw_value
        self.expected_format = expected_format
