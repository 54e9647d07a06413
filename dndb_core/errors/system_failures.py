"""
Resolution failure classifications for unrecoverable errors.

These exceptions abort a resolution run or indicate the process itself is
misconfigured (missing rule data, invalid settings).
"""

from typing import Any, Optional


class ResolutionFailureError(Exception):
    """Base class for unrecoverable resolution failures."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class RecordValidationError(ResolutionFailureError):
    """The character record fails the required-structure checks."""

    def __init__(self, message: str, step: Optional[str] = None,
                 issues: Optional[list[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.step = step
        self.issues = issues or []


class RuleTableError(ResolutionFailureError):
    """Rule table data is missing or malformed."""

    def __init__(self, message: str, table: Optional[str] = None,
                 path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.table = table
        self.path = path


class InvalidConfigurationError(ResolutionFailureError):
    """Merged configuration values fail validation."""

    def __init__(self, message: str, errors: Optional[list[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []


class StepExecutionError(ResolutionFailureError):
    """A pipeline step failed in a way that prevents assembling a result."""

    def __init__(self, message: str, step: Optional[str] = None,
                 character_id: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.step = step
        self.character_id = character_id
