"""
Recovery categories understood by the resolution pipeline.

A step that raises one of these is not failed outright: the orchestrator
substitutes the step's default result and records a recoverable error.
"""

from typing import Optional


class RecoverableError(Exception):
    """A step could not produce its result but a default is acceptable."""

    def __init__(self, message: str, step: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.step = step
        self.recoverable = True


class GracefulDegradationError(Exception):
    """Part of a result is unavailable; the rest can still be produced."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True
