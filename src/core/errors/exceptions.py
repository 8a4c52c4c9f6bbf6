"""
Unified exception hierarchy for webhdfs_output.

Provides typed exceptions with retry classification so the WebHDFS client
can tell retryable faults from fatal ones.
"""

# Import ErrorCategory from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from core.types import ErrorCategory


class PipelineError(Exception):
    """
    Base exception for all output errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        # Auth and permission failures never fix themselves on retry
        return self.category == ErrorCategory.TRANSIENT

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Startup Errors (fatal)
# =============================================================================


class ConfigurationError(PipelineError):
    """Invalid or incomplete configuration, rejected before any I/O."""

    category = ErrorCategory.PERMANENT


class DependencyError(PipelineError):
    """An optional capability (Kerberos, Snappy) could not be loaded."""

    category = ErrorCategory.PERMANENT

    def __init__(self, module: str, cause: Exception | None = None):
        super().__init__(
            f"Module {module} could not be loaded",
            cause,
            {"module": module},
        )
        self.module = module


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthError(PipelineError):
    """Base class for authentication errors."""

    category = ErrorCategory.AUTH


class CredentialError(AuthError):
    """Kerberos ticket acquisition or destruction failed."""

    def __init__(
        self,
        message: str,
        principal: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause, {"principal": principal})
        self.principal = principal


# =============================================================================
# Network/Connection Errors (Transient)
# =============================================================================


class TransientError(PipelineError):
    """Base class for transient/retriable errors."""

    category = ErrorCategory.TRANSIENT


class TimeoutError(TransientError):
    """Operation timeout error (transient, retryable)."""

    pass


class ConnectionError(TransientError):
    """Connection error (transient, retryable)."""

    pass


# =============================================================================
# Permanent Errors (Don't Retry)
# =============================================================================


class PermanentError(PipelineError):
    """Base class for permanent/non-retriable errors."""

    category = ErrorCategory.PERMANENT


class ConnectivityError(PipelineError):
    """Startup connectivity check against the namenode failed."""

    def __init__(self, host: str, port: int, cause: Exception | None = None):
        super().__init__(
            f"WebHDFS check request failed (namenode: {host}:{port})",
            cause,
            {"host": host, "port": port},
        )
        self.host = host
        self.port = port

    @property
    def category(self) -> ErrorCategory:  # type: ignore[override]
        return classify_exception(self.cause) if self.cause else ErrorCategory.UNKNOWN


# =============================================================================
# WebHDFS Errors
# =============================================================================


class HdfsRemoteError(PipelineError):
    """
    Error response from a WebHDFS endpoint.

    Attributes:
        exception: RemoteException name reported by the server (may be None)
        status_code: HTTP status of the failed response
    """

    category = ErrorCategory.PERMANENT

    def __init__(
        self,
        message: str,
        exception: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        context = dict(context or {})
        context.update({"exception": exception, "status_code": status_code})
        super().__init__(message, cause, context)
        self.exception = exception
        self.status_code = status_code


class HdfsFileNotFoundError(HdfsRemoteError):
    """Target path does not exist."""

    pass


class HdfsPermissionError(HdfsRemoteError):
    """Access denied by HDFS permissions."""

    pass


class HdfsAuthError(HdfsRemoteError):
    """Request rejected as unauthenticated (401, SecurityException)."""

    category = ErrorCategory.AUTH


class HdfsKnownError(HdfsRemoteError):
    """Known recoverable server-side fault, eligible for retry."""

    category = ErrorCategory.TRANSIENT


class HdfsStandbyError(HdfsRemoteError):
    """Namenode is in standby state; the active one must be used instead.

    Not retried against the same namenode. Callers fail over to the standby.
    """

    category = ErrorCategory.PERMANENT


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code in (408, 429):
        return ErrorCategory.TRANSIENT

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT  # Client errors, won't fix with retry

    if status_code in (502, 503, 504):
        return ErrorCategory.TRANSIENT  # Gateway errors, may recover

    if status_code >= 500:
        # WebHDFS reports most remote exceptions as 500; the body decides
        return ErrorCategory.UNKNOWN

    return ErrorCategory.UNKNOWN


def classify_exception(exc: Exception) -> ErrorCategory:
    """Classify an exception into error category."""
    # Already classified
    if isinstance(exc, PipelineError):
        return exc.category

    exc_type = type(exc).__name__.lower()
    exc_str = str(exc).lower()

    # Connection errors
    connection_markers = (
        "connectionerror",
        "connection refused",
        "connection reset",
        "connection aborted",
        "no route to host",
        "network unreachable",
        "name resolution",
        "broken pipe",
    )
    if any(m in exc_type or m in exc_str for m in connection_markers):
        return ErrorCategory.TRANSIENT

    # Timeout errors
    if "timeout" in exc_type or "timed out" in exc_str:
        return ErrorCategory.TRANSIENT

    # Auth errors
    auth_markers = ("401", "unauthorized", "authentication")
    if any(m in exc_str for m in auth_markers):
        return ErrorCategory.AUTH

    # Permission errors (not auth - actual permissions)
    if "403" in exc_str or "permission denied" in exc_str:
        return ErrorCategory.PERMANENT

    return ErrorCategory.UNKNOWN


def wrap_exception(
    exc: Exception,
    default_class: type = PipelineError,
    context: dict | None = None,
) -> PipelineError:
    """Wrap a generic exception in appropriate PipelineError subclass."""
    if isinstance(exc, PipelineError):
        if context:
            exc.context.update(context)
        return exc

    category = classify_exception(exc)
    exc_str = str(exc).lower()
    exc_type = type(exc).__name__.lower()
    context = context or {}

    if category == ErrorCategory.AUTH:
        return AuthError(str(exc), cause=exc, context=context)

    if category == ErrorCategory.TRANSIENT:
        if "timeout" in exc_type or "timed out" in exc_str:
            context["error_type"] = "timeout"
            return TimeoutError(str(exc), cause=exc, context=context)
        context["error_type"] = "connection"
        return ConnectionError(str(exc), cause=exc, context=context)

    if category == ErrorCategory.PERMANENT:
        return PermanentError(str(exc), cause=exc, context=context)

    return default_class(str(exc), cause=exc, context=context)
