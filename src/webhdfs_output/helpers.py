"""
Client preparation, connectivity check and optional dependency loading.

These are the startup building blocks the output facade composes:

    load_module("requests_kerberos")   # fail fast if a capability is missing
    client = prepare_client(client_config, credentials=session)   # no I/O
    verify(client)                     # first network request
"""

import importlib
import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Union

from core.auth.kerberos import CredentialSession
from core.errors.exceptions import ConfigurationError, ConnectivityError, DependencyError
from core.logging.utilities import log_exception
from webhdfs_output.client import DEFAULT_KERBEROS_SERVICE, DEFAULT_PORT, WebHdfsClient


# =============================================================================
# Authentication mode
# =============================================================================


@dataclass(frozen=True)
class SimpleAuth:
    """Pseudo authentication: the identity travels as user.name."""

    username: str


@dataclass(frozen=True)
class KerberosAuth:
    """SPNEGO authentication backed by a keytab-obtained ticket."""

    keytab: str
    service_principal: str = DEFAULT_KERBEROS_SERVICE


AuthMode = Union[SimpleAuth, KerberosAuth]


def resolve_auth_mode(
    username: str | None,
    kerberos_keytab: str | None,
    kerberos_service_principal: str | None = None,
) -> AuthMode:
    """
    Decide the authentication mode once, from which identity is configured.

    A keytab selects Kerberos (username is then ignored); otherwise the
    username selects simple auth.

    Raises:
        ConfigurationError: If neither a keytab nor a username is given
    """
    if kerberos_keytab:
        return KerberosAuth(
            keytab=kerberos_keytab,
            service_principal=kerberos_service_principal or DEFAULT_KERBEROS_SERVICE,
        )
    if username:
        return SimpleAuth(username=username)
    raise ConfigurationError(
        "A WebHDFS identity is required: set either a username or a Kerberos keytab"
    )


# =============================================================================
# Client configuration
# =============================================================================


@dataclass
class ClientConfig:
    """
    Resolved settings for one WebHDFS client.

    retry_interval and retry_times are left to the client library defaults
    when None.
    """

    host: str
    port: int = DEFAULT_PORT
    username: str | None = None
    kerberos_keytab: str | None = None
    kerberos_service_principal: str | None = None
    use_httpfs: bool = False
    open_timeout: float = 30
    read_timeout: float = 30
    retry_known_errors: bool = True
    retry_interval: float | None = None
    retry_times: int | None = None
    use_ssl: bool = False
    ssl_verify: bool | str = True
    ssl_cert: str | None = None
    ssl_key: str | None = None

    @property
    def auth_mode(self) -> AuthMode:
        return resolve_auth_mode(
            self.username, self.kerberos_keytab, self.kerberos_service_principal
        )

    @classmethod
    def from_settings(cls, settings, host: str | None = None, port: int | None = None) -> "ClientConfig":
        """
        Build from a config.WebHdfsConfig, optionally for another namenode.

        Args:
            settings: Loaded WebHdfsConfig
            host: Override host (standby namenode)
            port: Override port (standby namenode)
        """
        kerberos = settings.use_kerberos_auth
        return cls(
            host=host or settings.host,
            port=port or settings.port,
            username=settings.user,
            kerberos_keytab=settings.kerberos_keytab if kerberos else None,
            kerberos_service_principal=(
                settings.kerberos_service_principal if kerberos else None
            ),
            use_httpfs=settings.use_httpfs,
            open_timeout=settings.open_timeout,
            read_timeout=settings.read_timeout,
            retry_known_errors=settings.retry_known_errors,
            retry_interval=settings.retry_interval,
            retry_times=settings.retry_times,
            use_ssl=settings.use_ssl_auth,
            ssl_verify=settings.ssl_verify,
            ssl_cert=settings.ssl_cert,
            ssl_key=settings.ssl_key,
        )


# =============================================================================
# Startup operations
# =============================================================================


def load_module(module_name: str, logger: logging.Logger | None = None) -> ModuleType:
    """
    Import a module by name, failing loudly if it is unavailable.

    Args:
        module_name: Importable module name (e.g. "snappy")
        logger: Diagnostic sink (defaults to this module's logger)

    Returns:
        The imported module

    Raises:
        DependencyError: If the import fails
    """
    log = logger or logging.getLogger(__name__)
    try:
        return importlib.import_module(module_name)
    except ImportError as e:
        log.error(
            "Module %s could not be loaded.",
            module_name,
            extra={"module_name": module_name, "error_message": str(e)[:500]},
        )
        raise DependencyError(module_name, cause=e) from e


def prepare_client(
    config: ClientConfig,
    credentials: CredentialSession | None = None,
    logger: logging.Logger | None = None,
) -> WebHdfsClient:
    """
    Build a configured, not yet verified WebHDFS client.

    No network I/O happens here.

    Args:
        config: Resolved client settings
        credentials: Kerberos ticket session the client relies on, if any
        logger: Diagnostic sink handed to the client

    Returns:
        WebHdfsClient ready for verify()

    Raises:
        ConfigurationError: If no identity is configured
    """
    auth = config.auth_mode

    if isinstance(auth, KerberosAuth):
        client = WebHdfsClient(config.host, config.port, credentials=credentials, logger=logger)
        client.kerberos = True
        client.kerberos_keytab = auth.keytab
        client.kerberos_service_principal = auth.service_principal
    else:
        client = WebHdfsClient(config.host, config.port, auth.username, logger=logger)

    client.httpfs_mode = config.use_httpfs
    client.open_timeout = config.open_timeout
    client.read_timeout = config.read_timeout
    client.retry_known_errors = config.retry_known_errors
    if config.retry_interval is not None:
        client.retry_interval = config.retry_interval
    if config.retry_times is not None:
        client.retry_times = config.retry_times

    client.use_ssl = config.use_ssl
    client.ssl_verify = config.ssl_verify
    client.ssl_cert = config.ssl_cert
    client.ssl_key = config.ssl_key

    (logger or logging.getLogger(__name__)).debug(
        "Prepared WebHDFS client for %s:%s",
        config.host,
        config.port,
        extra={
            "host": config.host,
            "port": config.port,
            "auth_mode": "kerberos" if client.kerberos else "simple",
        },
    )
    return client


def verify(client: WebHdfsClient, logger: logging.Logger | None = None) -> None:
    """
    Check that the namenode answers a root listing.

    Raises:
        ConnectivityError: Carrying host and port, chained to the failure
    """
    try:
        client.list("/")
    except Exception as e:
        log_exception(
            logger or logging.getLogger(__name__),
            e,
            f"WebHDFS check request failed. (namenode: {client.host}:{client.port}, "
            f"Exception: {e})",
            host=client.host,
            port=client.port,
        )
        raise ConnectivityError(client.host, client.port, cause=e) from e


__all__ = [
    "SimpleAuth",
    "KerberosAuth",
    "AuthMode",
    "resolve_auth_mode",
    "ClientConfig",
    "load_module",
    "prepare_client",
    "verify",
]
