"""
Record data error classifications for character processing.

These exceptions categorize problems in the incoming character record that a
resolver can work around by substituting a safe default.
"""

from typing import Any, Optional


class RecordDataError(Exception):
    """Base class for record data issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MissingRecordDataError(RecordDataError):
    """A section of the character record is absent."""

    def __init__(self, message: str, section: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.section = section


class MalformedRecordDataError(RecordDataError):
    """Data exists but is in an unexpected shape."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class PartialRecordDataError(RecordDataError):
    """Some fields of an entry are missing but the rest is usable."""

    def __init__(self, message: str, missing_fields: Optional[list] = None,
                 available_fields: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.missing_fields = missing_fields or []
        self.available_fields = available_fields or []


class UnmappedEntryError(RecordDataError):
    """An identifier has no entry in the rule tables."""

    def __init__(self, message: str, table: Optional[str] = None,
                 key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.table = table
        self.key = key
