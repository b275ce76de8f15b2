"""
Centralized logging configuration for the MindTrade client.

This module provides standardized logging configuration using structlog
for all components. All logging throughout the client should use this
configuration to ensure consistent formatting and structured logging.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    # Logs go to stderr so CLI output on stdout stays machine-readable
    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(message)s"
    )
    logging.getLogger().setLevel(log_level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                       structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

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


def get_api_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for backend API traffic.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for API calls
    """
    return get_logger(name).bind(subsystem="api")


def get_state_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for local state stores (trades, rules, presets).

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for state changes
    """
    return get_logger(name).bind(subsystem="state")


def log_api_call(
    logger: FilteringBoundLogger,
    method: str,
    endpoint: str,
    status_code: Optional[int],
    duration_ms: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a backend API call with standardized format.

    Args:
        logger: Structlog logger instance
        method: HTTP method
        endpoint: Endpoint path relative to the API base URL
        status_code: HTTP status, None if the request never completed
        duration_ms: Round-trip time in milliseconds
        context: Additional context data
    """
    bound_logger = logger.bind(
        method=method,
        endpoint=endpoint,
        status_code=status_code,
        duration_ms=duration_ms,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if status_code is not None and 200 <= status_code < 300:
        bound_logger.debug("API call succeeded")
    else:
        bound_logger.warning("API call failed")
