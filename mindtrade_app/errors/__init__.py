"""
Error classification system for the MindTrade client.

This module provides a structured exception hierarchy for failures talking
to the backend, persisting local state and mapping API records.
"""

from .data_quality import (
    DataQualityError,
    MissingFieldError,
    MalformedRecordError,
)
from .client_failures import (
    ClientError,
    ApiRequestError,
    AuthenticationRequiredError,
    NetworkError,
    StreamError,
    PersistenceError,
    NoTradesToExportError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingFieldError",
    "MalformedRecordError",
    # Client Failures
    "ClientError",
    "ApiRequestError",
    "AuthenticationRequiredError",
    "NetworkError",
    "StreamError",
    "PersistenceError",
    "NoTradesToExportError",
]
