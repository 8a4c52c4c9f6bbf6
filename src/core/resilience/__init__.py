"""
Resilience patterns module.

Provides the retry primitive used by the WebHDFS client.

Components:
    - RetryConfig: Bounded attempt count and interval
    - retry_call: Invoke a callable under a RetryConfig
"""

from .retry import (
    NO_RETRY,
    RetryConfig,
    retry_call,
)

__all__ = [
    "RetryConfig",
    "NO_RETRY",
    "retry_call",
]
