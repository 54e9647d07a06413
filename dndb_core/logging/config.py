"""
Centralized logging configuration for the character resolution pipeline.

This module provides standardized logging configuration using structlog
for all components. Resolvers and the orchestrator should obtain loggers
from here so that every event carries the same structured fields.
"""
import logging
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import FilteringBoundLogger

# Processors shared by console and JSON output, before any renderer
_BASE_PROCESSORS = (
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
)


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None,
    stream: Optional[TextIO] = None
) -> None:
    """
    Configure structlog for processes embedding the resolution pipeline.

    The library never calls this itself; host applications decide where
    resolution events go.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Render events as JSON lines instead of console output
        include_timestamp: Add an ISO timestamp to each event
        include_caller: Add filename and line number to each event
        extra_processors: Processors inserted before the renderer
        stream: Output stream, stderr if not given
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=stream or sys.stderr,
        format="%(message)s",
        force=True,
    )

    processors = list(_BASE_PROCESSORS)

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    processors.extend(extra_processors or [])
    processors.append(
        structlog.processors.JSONRenderer() if format_json else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_step_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for pipeline step reporting.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger carrying the resolution subsystem tag
    """
    logger = get_logger(name)

    return logger.bind(
        subsystem="resolution",
        audit_trail=True
    )


def log_step_outcome(
    logger: FilteringBoundLogger,
    character_id: Any,
    step: str,
    status: str,
    duration_ms: float,
    warnings: Optional[list[str]] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of one pipeline step with standardized format.

    Args:
        logger: Structlog logger instance
        character_id: ID of the character being resolved
        step: Pipeline step name
        status: success, warning or fatal
        duration_ms: Step wall time in milliseconds
        warnings: Warning messages produced by the step
        context: Additional context data
    """
    bound_logger = logger.bind(
        character_id=character_id,
        step=step,
        step_status=status,
        duration_ms=round(duration_ms, 3),
    )

    if warnings:
        bound_logger = bound_logger.bind(warnings=warnings)

    if context:
        bound_logger = bound_logger.bind(context=context)

    if status == "fatal":
        bound_logger.error("Resolution step failed")
    elif status == "warning":
        bound_logger.warning("Resolution step completed with warnings")
    else:
        bound_logger.debug("Resolution step completed")
