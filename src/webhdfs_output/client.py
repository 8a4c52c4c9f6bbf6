"""
WebHDFS REST client using requests.

Speaks the WebHDFS v1 protocol (``/webhdfs/v1/<path>?op=...``) against a
namenode or an HttpFS gateway.

Authentication:
    - Simple: ``user.name`` query parameter
    - Kerberos: SPNEGO via requests-kerberos, using the process ticket cache
      populated by core.auth (the client never runs kinit itself)

Writes:
    CREATE/APPEND go to the namenode first, which answers 307 with the
    datanode location the data is then sent to. In httpfs_mode the gateway
    accepts the data on the first request (``data=true``).

Retries:
    When retry_known_errors is set, transient failures (known recoverable
    RemoteExceptions, connection resets, timeouts) are retried retry_times
    times, retry_interval seconds apart. Auth, permission, not-found and
    malformed-request errors are never retried.
"""

import logging
from typing import Any
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from core.auth.kerberos import CredentialSession
from core.errors.classifiers import WebHdfsErrorClassifier
from core.errors.exceptions import HdfsRemoteError
from core.resilience.retry import NO_RETRY, RetryConfig, retry_call

logger = logging.getLogger(__name__)

API_PREFIX = "/webhdfs/v1"

# Library defaults, applied when the caller does not set them
DEFAULT_PORT = 50070
DEFAULT_OPEN_TIMEOUT = 30
DEFAULT_READ_TIMEOUT = 60
DEFAULT_RETRY_INTERVAL = 1
DEFAULT_RETRY_TIMES = 1
DEFAULT_KERBEROS_SERVICE = "HTTP"

OCTET_STREAM_HEADERS = {"Content-Type": "application/octet-stream"}


class WebHdfsClient:
    """
    Client for WebHDFS file operations.

    Construction performs no network I/O; the HTTP session and the SPNEGO
    auth handler are created on the first request. Settings are plain
    attributes and may be changed between requests.

    Attributes:
        host: Namenode (or HttpFS) host
        port: Namenode (or HttpFS) port
        username: Identity for simple auth (ignored in Kerberos mode)
        credentials: CredentialSession backing Kerberos mode, if any
        httpfs_mode: Send data in the first request (HttpFS gateways)
        open_timeout: Connect timeout in seconds
        read_timeout: Read timeout in seconds
        retry_known_errors: Retry transient failures
        retry_interval: Seconds between retries
        retry_times: Retries after the first attempt
        kerberos: Authenticate with SPNEGO
        kerberos_keytab: Keytab the ticket was obtained from (informational)
        kerberos_service_principal: Service name of the HTTP principal
        use_ssl: Use https
        ssl_verify: Verify server certificate (bool or CA bundle path)
        ssl_cert: Client certificate path
        ssl_key: Client key path
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = DEFAULT_PORT,
        username: str | None = None,
        *,
        credentials: CredentialSession | None = None,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ):
        self.host = host
        self.port = int(port)
        self.username = username
        self.credentials = credentials

        self.httpfs_mode = False
        self.open_timeout: float | None = DEFAULT_OPEN_TIMEOUT
        self.read_timeout: float | None = DEFAULT_READ_TIMEOUT
        self.retry_known_errors = False
        self.retry_interval: float = DEFAULT_RETRY_INTERVAL
        self.retry_times: int = DEFAULT_RETRY_TIMES

        self.kerberos = False
        self.kerberos_keytab: str | None = None
        self.kerberos_service_principal: str | None = None

        self.use_ssl = False
        self.ssl_verify: bool | str = True
        self.ssl_cert: str | None = None
        self.ssl_key: str | None = None

        self._session = session
        self._owns_session = session is None
        self._auth: Any | None = None
        self._classifier = WebHdfsErrorClassifier()
        self._logger = logger or logging.getLogger(__name__)

    def __repr__(self) -> str:
        mode = "kerberos" if self.kerberos else "simple"
        return f"WebHdfsClient({self.host}:{self.port}, auth={mode})"

    # ------------------------------------------------------------------
    # Connection setup
    # ------------------------------------------------------------------

    @property
    def base_url(self) -> str:
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.host}:{self.port}"

    @property
    def retry_config(self) -> RetryConfig:
        """Retry policy derived from the current settings."""
        if not self.retry_known_errors:
            return NO_RETRY
        return RetryConfig.fixed_interval(self.retry_times, self.retry_interval)

    def _get_session(self) -> requests.Session:
        if self._session is None:
            session = requests.Session()
            # Retries are decided here from the error classification, not by urllib3
            adapter = HTTPAdapter(max_retries=0)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
            self._session = session
        return self._session

    def _get_auth(self) -> Any | None:
        if not self.kerberos:
            return None
        if self._auth is None:
            from requests_kerberos import OPTIONAL, HTTPKerberosAuth

            self._auth = HTTPKerberosAuth(
                mutual_authentication=OPTIONAL,
                service=self.kerberos_service_principal or DEFAULT_KERBEROS_SERVICE,
            )
        return self._auth

    def _request_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "timeout": (self.open_timeout, self.read_timeout),
            "auth": self._get_auth(),
        }
        if self.use_ssl:
            kwargs["verify"] = self.ssl_verify
            if self.ssl_cert and self.ssl_key:
                kwargs["cert"] = (self.ssl_cert, self.ssl_key)
            elif self.ssl_cert:
                kwargs["cert"] = self.ssl_cert
        return kwargs

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{API_PREFIX}{quote(path)}"

    def _params(self, op: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        query: dict[str, Any] = {"op": op}
        if not self.kerberos and self.username:
            query["user.name"] = self.username
        for key, value in (params or {}).items():
            if value is None:
                continue
            query[key] = str(value).lower() if isinstance(value, bool) else value
        return query

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _send(
        self,
        method: str,
        url: str,
        op: str,
        path: str,
        params: dict[str, Any] | None = None,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
        allow_redirects: bool = False,
        expect_redirect: bool = False,
    ) -> requests.Response:
        """Send one HTTP request and classify any failure."""
        context = {"hdfs_op": op, "hdfs_path": path, "host": self.host, "port": self.port}
        try:
            response = self._get_session().request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                allow_redirects=allow_redirects,
                **self._request_kwargs(),
            )
        except requests.RequestException as e:
            raise self._classifier.from_transport_error(e, context) from e

        self._logger.debug(
            "WebHDFS %s %s -> %s",
            op,
            path,
            response.status_code,
            extra={
                "hdfs_op": op,
                "hdfs_path": path,
                "http_method": method,
                "http_status": response.status_code,
            },
        )

        if expect_redirect and response.status_code in (301, 302, 303, 307, 308):
            return response
        if not 200 <= response.status_code < 300:
            raise self._classifier.from_response(response, context)
        return response

    def _call(self, op: str, func, *args, **kwargs):
        """Run one logical operation under the retry policy."""
        return retry_call(
            func,
            *args,
            config=self.retry_config,
            operation=f"webhdfs.{op.lower()}",
            log=self._logger,
            **kwargs,
        )

    def _operate(
        self,
        method: str,
        path: str,
        op: str,
        params: dict[str, Any] | None = None,
        allow_redirects: bool = False,
    ) -> requests.Response:
        return self._call(
            op,
            self._send,
            method,
            self._url(path),
            op,
            path,
            params=self._params(op, params),
            allow_redirects=allow_redirects,
        )

    def _write_once(
        self,
        method: str,
        path: str,
        op: str,
        data: bytes,
        params: dict[str, Any],
    ) -> requests.Response:
        url = self._url(path)
        query = self._params(op, params)

        if self.httpfs_mode:
            query["data"] = "true"
            return self._send(
                method, url, op, path, params=query, data=data, headers=OCTET_STREAM_HEADERS
            )

        redirect = self._send(method, url, op, path, params=query, expect_redirect=True)
        location = redirect.headers.get("Location")
        if not location:
            raise HdfsRemoteError(
                f"{op} on {path} did not redirect to a datanode",
                status_code=redirect.status_code,
                context={"hdfs_op": op, "hdfs_path": path},
            )
        return self._send(method, location, op, path, data=data, headers=OCTET_STREAM_HEADERS)

    def _write(
        self, method: str, path: str, op: str, data: bytes, params: dict[str, Any]
    ) -> requests.Response:
        response = self._call(op, self._write_once, method, path, op, data, params)
        self._logger.debug(
            "WebHDFS %s wrote %d bytes to %s",
            op,
            len(data),
            path,
            extra={"hdfs_op": op, "hdfs_path": path, "bytes_written": len(data)},
        )
        return response

    # ------------------------------------------------------------------
    # File system operations
    # ------------------------------------------------------------------

    def list(self, path: str) -> list[dict[str, Any]]:
        """Return the FileStatus entries of a directory (LISTSTATUS)."""
        response = self._operate("GET", path, "LISTSTATUS")
        return response.json()["FileStatuses"]["FileStatus"]

    def stat(self, path: str) -> dict[str, Any]:
        """Return the FileStatus of a path (GETFILESTATUS)."""
        response = self._operate("GET", path, "GETFILESTATUS")
        return response.json()["FileStatus"]

    def create(
        self,
        path: str,
        data: bytes,
        overwrite: bool = False,
        permission: str | None = None,
        replication: int | None = None,
        blocksize: int | None = None,
    ) -> bool:
        """Create a file holding data (CREATE)."""
        params = {
            "overwrite": overwrite,
            "permission": permission,
            "replication": replication,
            "blocksize": blocksize,
        }
        self._write("PUT", path, "CREATE", data, params)
        return True

    def append(self, path: str, data: bytes, buffersize: int | None = None) -> bool:
        """Append data to an existing file (APPEND)."""
        self._write("POST", path, "APPEND", data, {"buffersize": buffersize})
        return True

    def read(self, path: str, offset: int | None = None, length: int | None = None) -> bytes:
        """Read a file's content (OPEN), following the datanode redirect."""
        response = self._operate(
            "GET", path, "OPEN", {"offset": offset, "length": length}, allow_redirects=True
        )
        return response.content

    def mkdir(self, path: str, permission: str | None = None) -> bool:
        """Create a directory and its parents (MKDIRS)."""
        response = self._operate("PUT", path, "MKDIRS", {"permission": permission})
        return bool(response.json().get("boolean"))

    def delete(self, path: str, recursive: bool = False) -> bool:
        """Delete a path (DELETE)."""
        response = self._operate("DELETE", path, "DELETE", {"recursive": recursive})
        return bool(response.json().get("boolean"))

    def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None

    def __enter__(self) -> "WebHdfsClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "WebHdfsClient",
    "API_PREFIX",
    "DEFAULT_PORT",
    "DEFAULT_OPEN_TIMEOUT",
    "DEFAULT_READ_TIMEOUT",
    "DEFAULT_RETRY_INTERVAL",
    "DEFAULT_RETRY_TIMES",
    "DEFAULT_KERBEROS_SERVICE",
]
