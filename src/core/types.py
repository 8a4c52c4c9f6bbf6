"""
Core types and protocols used across modules.

This module provides base types, enums, and protocol definitions that are
shared across the core library to ensure consistency and type safety.
"""

from enum import Enum
from typing import Protocol


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    This enum is used throughout the output to classify errors and determine
    whether the WebHDFS client may retry a request.

    Categories:
        TRANSIENT: Temporary failures that may succeed on retry
                   (e.g., connection resets, timeouts, lease recovery)
        AUTH: Authentication failures (401, failed kinit). Never retried.
        PERMANENT: Non-retriable failures that won't succeed on retry
                   (e.g., 403, 404, malformed requests, bad configuration)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class CredentialProvider(Protocol):
    """
    Protocol for external credential lifecycle operations.

    The production implementation shells out to kinit/kdestroy; tests use
    in-memory fakes.
    """

    def acquire(self, principal: str, keytab: str) -> None:
        """
        Obtain a ticket for principal using keytab.

        Raises:
            CredentialError: If the ticket could not be obtained
        """
        ...

    def release(self) -> None:
        """
        Destroy any ticket held by the process.

        Raises:
            CredentialError: If ticket destruction failed
        """
        ...


__all__ = [
    "ErrorCategory",
    "CredentialProvider",
]
