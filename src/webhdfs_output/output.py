"""
WebHDFS output facade.

Composes dependency checks, Kerberos credentials, client preparation and
connectivity verification in a fixed order, then writes encoded payloads
by appending (or creating) files on HDFS.

Startup order:
    1. Kerberos configured: load requests_kerberos
    2. Snappy configured: load snappy
    3. Kerberos configured: acquire the ticket
    4. Prepare the active (and standby) client, no I/O
    5. Verify the active namenode, failing over to the standby if configured
    6. Any failure in 4-5 releases the ticket before propagating

Usage:
    with WebHdfsOutput(load_config(path)) as output:
        output.write("/logs/app/2024-01-01.log", b"line\\n")
"""

import logging
from typing import Optional

from config.config import WebHdfsConfig
from core.auth.kerberos import CredentialManager, CredentialSession, get_default_manager
from core.errors.exceptions import HdfsFileNotFoundError, HdfsStandbyError
from core.logging.context import set_log_context
from core.logging.utilities import log_exception
from webhdfs_output.client import WebHdfsClient
from webhdfs_output.codec import (
    CompressionMode,
    SnappyFormat,
    compress,
    file_extension,
    snappy_header,
)
from webhdfs_output.helpers import load_module, prepare_client, verify


class WebHdfsOutput:
    """
    Writes log payloads to HDFS through WebHDFS.

    Not thread-safe: use one instance per writer.

    Attributes:
        config: Validated WebHdfsConfig
        client: Active namenode client (after start)
        standby_client: Standby namenode client, if configured
    """

    def __init__(
        self,
        config: WebHdfsConfig,
        credential_manager: Optional[CredentialManager] = None,
        logger: Optional[logging.Logger] = None,
    ):
        config.validate()
        self.config = config
        self.compression = CompressionMode(config.compression)
        self.snappy_format = SnappyFormat(config.snappy_format)
        self.client: Optional[WebHdfsClient] = None
        self.standby_client: Optional[WebHdfsClient] = None

        self._credential_manager = credential_manager
        self._credentials: Optional[CredentialSession] = None
        self._logger = logger or logging.getLogger(__name__)

    @property
    def uses_kerberos(self) -> bool:
        return self.config.use_kerberos_auth

    @property
    def uses_snappy(self) -> bool:
        return self.compression is CompressionMode.SNAPPY

    @property
    def credential_manager(self) -> CredentialManager:
        if self._credential_manager is None:
            self._credential_manager = get_default_manager()
        return self._credential_manager

    @property
    def started(self) -> bool:
        return self.client is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Run the startup sequence.

        Raises:
            DependencyError: A configured capability is not installed
            CredentialError: The Kerberos ticket could not be obtained
            ConnectivityError: No namenode answered the check request
        """
        if self.uses_kerberos:
            load_module("requests_kerberos", logger=self._logger)
        if self.uses_snappy:
            load_module("snappy", logger=self._logger)

        if self.uses_kerberos:
            self._credentials = self.credential_manager.acquire(
                self.config.kerberos_principal, self.config.kerberos_keytab
            )

        try:
            self._prepare_clients()
            self._verify_clients()
        except Exception:
            self._close_clients()
            if self.uses_kerberos:
                self.credential_manager.release()
                self._credentials = None
            raise

        set_log_context(namenode=f"{self.client.host}:{self.client.port}")
        self._logger.info(
            "WebHDFS output started",
            extra={
                "host": self.client.host,
                "port": self.client.port,
                "auth_mode": "kerberos" if self.uses_kerberos else "simple",
                "compression": self.compression.value,
            },
        )

    def _prepare_clients(self) -> None:
        self.client = prepare_client(
            self.config.to_client_config(), self._credentials, logger=self._logger
        )
        if self.config.has_standby:
            self.standby_client = prepare_client(
                self.config.to_client_config(standby=True), self._credentials, logger=self._logger
            )

    def _verify_clients(self) -> None:
        try:
            verify(self.client, logger=self._logger)
        except Exception:
            if self.standby_client is None:
                raise
            self._logger.warning(
                "Active namenode check failed, trying standby %s:%s",
                self.standby_client.host,
                self.standby_client.port,
                extra={"host": self.standby_client.host, "port": self.standby_client.port},
            )
            verify(self.standby_client, logger=self._logger)
            self._swap_clients()

    def _swap_clients(self) -> None:
        self.client, self.standby_client = self.standby_client, self.client
        set_log_context(namenode=f"{self.client.host}:{self.client.port}")
        self._logger.info(
            "Switched active namenode to %s:%s",
            self.client.host,
            self.client.port,
            extra={"host": self.client.host, "port": self.client.port},
        )

    def close(self) -> None:
        """Close the clients and destroy the Kerberos ticket when configured."""
        self._close_clients()
        if self.uses_kerberos:
            self.credential_manager.release()
            self._credentials = None

    def _close_clients(self) -> None:
        for client in (self.client, self.standby_client):
            if client is not None:
                client.close()
        self.client = None
        self.standby_client = None

    def __enter__(self) -> "WebHdfsOutput":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def destination(self, path: str) -> str:
        """Destination path with the compression extension applied."""
        extension = file_extension(self.compression)
        if extension and not path.endswith(extension):
            return path + extension
        return path

    def write(self, path: str, data: bytes | str) -> str:
        """
        Encode data and append it to path, creating the file if needed.

        Args:
            path: HDFS destination (the compression extension is added)
            data: Payload for this write

        Returns:
            The HDFS path written to

        Raises:
            RuntimeError: If start() has not completed
            PipelineError: The write failed after the client's retry policy
        """
        if not self.started:
            raise RuntimeError("WebHdfsOutput.start() must complete before write()")

        target = self.destination(path)
        payload = compress(
            data,
            self.compression,
            chunk_size=self.config.snappy_bufsize,
            snappy_format=self.snappy_format,
        )

        try:
            self._write_payload(target, payload)
        except HdfsStandbyError as e:
            if self.standby_client is None:
                log_exception(self._logger, e, "WebHDFS write failed", hdfs_path=target)
                raise
            self._logger.warning(
                "Namenode %s:%s is in standby state, failing over",
                self.client.host,
                self.client.port,
                extra={"host": self.client.host, "port": self.client.port, "hdfs_path": target},
            )
            self._swap_clients()
            try:
                self._write_payload(target, payload)
            except Exception as retry_error:
                log_exception(
                    self._logger, retry_error, "WebHDFS write failed", hdfs_path=target
                )
                raise
        except Exception as e:
            log_exception(self._logger, e, "WebHDFS write failed", hdfs_path=target)
            raise

        return target

    def _write_payload(self, path: str, payload: bytes) -> None:
        try:
            self.client.append(path, payload)
        except HdfsFileNotFoundError:
            self._logger.debug(
                "File %s not found, creating it", path, extra={"hdfs_path": path}
            )
            if self.uses_snappy and self.snappy_format is SnappyFormat.STREAM:
                payload = snappy_header() + payload
            self.client.create(path, payload)


__all__ = ["WebHdfsOutput"]
