"""
Core library: Reusable, infrastructure-agnostic components.

Modules:
    auth        - Kerberos ticket lifecycle (kinit/kdestroy)
    resilience  - Bounded retry with a fixed or exponential interval
    logging     - Structured JSON logging with session context
    errors      - Error classification and exception hierarchy
    utils       - JSON serialization helpers

Design Principles:
    - No dependencies on the output facade or its configuration
    - All modules are independently testable
"""

from .types import CredentialProvider, ErrorCategory

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
    "CredentialProvider",
]
