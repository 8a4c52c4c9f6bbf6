"""
Centralized error classification for WebHDFS operations.

Turns failed HTTP responses and requests transport exceptions into the
typed PipelineError hierarchy so retry decisions are made in one place.
"""

import json
from typing import Optional

import requests

from core.errors.exceptions import (
    ConnectionError,
    HdfsAuthError,
    HdfsFileNotFoundError,
    HdfsKnownError,
    HdfsPermissionError,
    HdfsRemoteError,
    HdfsStandbyError,
    PipelineError,
    TimeoutError,
    classify_http_status,
    wrap_exception,
)
from core.types import ErrorCategory


# RemoteException names reported in WebHDFS error bodies
HDFS_ERROR_CODES = {
    # Recoverable server-side conditions (retried when retry_known_errors is set)
    "known_errors": [
        "LeaseExpiredException",
        "RetriableException",
        "AlreadyBeingCreatedException",
        "RecoveryInProgressException",
        "SafeModeException",
    ],
    "standby_errors": [
        "StandbyException",
    ],
    "not_found_errors": [
        "FileNotFoundException",
    ],
    "permission_errors": [
        "AccessControlException",
    ],
    "auth_errors": [
        "SecurityException",
        "AuthenticationException",
    ],
}


def classify_remote_exception(exception_name: str | None) -> Optional[str]:
    """
    Classify a RemoteException name into a category string.

    Args:
        exception_name: Short or fully qualified Java exception name

    Returns:
        "known", "standby", "not_found", "permission", "auth", or None
    """
    if not exception_name:
        return None

    short_name = exception_name.rsplit(".", 1)[-1]

    if short_name in HDFS_ERROR_CODES["standby_errors"]:
        return "standby"
    if short_name in HDFS_ERROR_CODES["known_errors"]:
        return "known"
    if short_name in HDFS_ERROR_CODES["not_found_errors"]:
        return "not_found"
    if short_name in HDFS_ERROR_CODES["permission_errors"]:
        return "permission"
    if short_name in HDFS_ERROR_CODES["auth_errors"]:
        return "auth"
    return None


def _parse_remote_exception(response: requests.Response) -> tuple[str | None, str]:
    """Extract (exception name, message) from a WebHDFS error body."""
    try:
        body = response.json()
    except (ValueError, json.JSONDecodeError):
        text = (response.text or "").strip()
        return None, text[:500] or f"HTTP {response.status_code}"

    remote = body.get("RemoteException") if isinstance(body, dict) else None
    if not isinstance(remote, dict):
        return None, f"HTTP {response.status_code}"

    name = remote.get("exception") or remote.get("javaClassName")
    message = remote.get("message") or name or f"HTTP {response.status_code}"
    return name, message


class WebHdfsErrorClassifier:
    """
    Error classification for WebHDFS responses and transport failures.
    """

    @staticmethod
    def from_response(
        response: requests.Response, context: Optional[dict] = None
    ) -> HdfsRemoteError:
        """
        Build a typed error from a failed WebHDFS response.

        Args:
            response: Response with a non-2xx status
            context: Additional context (merged with {"service": "webhdfs"})

        Returns:
            Classified HdfsRemoteError subclass
        """
        ctx = {"service": "webhdfs"}
        if context:
            ctx.update(context)

        status = response.status_code
        name, message = _parse_remote_exception(response)
        kind = classify_remote_exception(name)

        if kind == "standby":
            cls: type[HdfsRemoteError] = HdfsStandbyError
        elif kind == "known":
            cls = HdfsKnownError
        elif kind == "not_found" or (kind is None and status == 404):
            cls = HdfsFileNotFoundError
        elif kind == "permission" or (kind is None and status == 403):
            cls = HdfsPermissionError
        elif kind == "auth" or status == 401:
            cls = HdfsAuthError
        else:
            status_category = classify_http_status(status)
            cls = HdfsKnownError if status_category == ErrorCategory.TRANSIENT else HdfsRemoteError

        return cls(message, exception=name, status_code=status, context=ctx)

    @staticmethod
    def from_transport_error(
        error: requests.RequestException, context: Optional[dict] = None
    ) -> PipelineError:
        """
        Classify a requests transport exception.

        Timeouts and connection failures are transient; anything else
        (invalid URL, too many redirects) is permanent.
        """
        ctx = {"service": "webhdfs"}
        if context:
            ctx.update(context)

        if isinstance(error, requests.Timeout):
            ctx["error_type"] = "timeout"
            return TimeoutError(f"WebHDFS request timed out: {error}", cause=error, context=ctx)

        if isinstance(error, requests.ConnectionError):
            ctx["error_type"] = "connection"
            return ConnectionError(
                f"WebHDFS connection failed: {error}", cause=error, context=ctx
            )

        return wrap_exception(error, default_class=HdfsRemoteError, context=ctx)
