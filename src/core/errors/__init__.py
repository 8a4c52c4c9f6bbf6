"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- PipelineError hierarchy for typed exceptions
- Classification utilities for error handling
- WebHDFS RemoteException classifier
"""

from core.errors.classifiers import (
    # Constants
    HDFS_ERROR_CODES,
    # Classes
    WebHdfsErrorClassifier,
    # Functions
    classify_remote_exception,
)
from core.errors.exceptions import (
    AuthError,
    ConfigurationError,
    ConnectivityError,
    CredentialError,
    DependencyError,
    # Enums
    ErrorCategory,
    HdfsAuthError,
    HdfsFileNotFoundError,
    HdfsKnownError,
    HdfsPermissionError,
    HdfsRemoteError,
    HdfsStandbyError,
    PermanentError,
    # Base classes
    PipelineError,
    TransientError,
    # Classification utilities
    classify_exception,
    classify_http_status,
    wrap_exception,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "PipelineError",
    "AuthError",
    "TransientError",
    "PermanentError",
    # Startup errors
    "ConfigurationError",
    "DependencyError",
    "CredentialError",
    "ConnectivityError",
    # WebHDFS errors
    "HdfsRemoteError",
    "HdfsFileNotFoundError",
    "HdfsPermissionError",
    "HdfsAuthError",
    "HdfsKnownError",
    "HdfsStandbyError",
    # Classification utilities
    "classify_http_status",
    "classify_exception",
    "wrap_exception",
    # WebHDFS classifiers
    "HDFS_ERROR_CODES",
    "classify_remote_exception",
    "WebHdfsErrorClassifier",
]
