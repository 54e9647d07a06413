"""
Logging configuration and utilities for the character resolution pipeline.
"""
from .config import configure_logging, get_logger, get_step_logger, log_step_outcome

__all__ = ["configure_logging", "get_logger", "get_step_logger", "log_step_outcome"]
