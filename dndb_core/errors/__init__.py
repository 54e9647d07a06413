"""
Error classification system for character resolution.

This module provides a structured exception hierarchy separating recoverable
record data problems from failures that abort a resolution run.
"""

from .data_quality import (
    RecordDataError,
    MissingRecordDataError,
    MalformedRecordDataError,
    PartialRecordDataError,
    UnmappedEntryError,
)
from .system_failures import (
    ResolutionFailureError,
    RecordValidationError,
    RuleTableError,
    InvalidConfigurationError,
    StepExecutionError,
)
from .recovery import (
    RecoverableError,
    GracefulDegradationError,
)

__all__ = [
    # Record Data Errors
    "RecordDataError",
    "MissingRecordDataError",
    "MalformedRecordDataError",
    "PartialRecordDataError",
    "UnmappedEntryError",
    # Resolution Failures
    "ResolutionFailureError",
    "RecordValidationError",
    "RuleTableError",
    "InvalidConfigurationError",
    "StepExecutionError",
    # Recovery Categories
    "RecoverableError",
    "GracefulDegradationError",
]
