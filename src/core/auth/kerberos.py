"""
Kerberos ticket lifecycle management.

The WebHDFS client authenticates with SPNEGO, which reads the process-wide
Kerberos ticket cache. This module obtains that ticket with kinit before a
Kerberos-mode client is used and destroys it with kdestroy on teardown.

Ownership:
    The output facade owns acquire/release. Clients only hold a reference
    to the resulting CredentialSession and never manage the ticket.

Thread Safety:
    The ticket cache is shared by the whole process, so acquire and release
    on a CredentialManager are serialized by a lock.

Example:
    >>> manager = CredentialManager()
    >>> with manager.session("logs@EXAMPLE.COM", "/etc/security/logs.keytab") as session:
    ...     client = prepare_client(config, credentials=session)
"""

import logging
import subprocess
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional

from core.errors.exceptions import ConfigurationError, CredentialError
from core.types import CredentialProvider

logger = logging.getLogger(__name__)

DEFAULT_KINIT_PATH = "/usr/bin/kinit"
DEFAULT_KDESTROY_PATH = "/usr/bin/kdestroy"

# kinit against an unreachable KDC can hang well past any sane startup time
DEFAULT_COMMAND_TIMEOUT = 60


@dataclass(frozen=True)
class CredentialSession:
    """
    An acquired Kerberos ticket.

    Attributes:
        principal: Principal the ticket was issued for
        keytab: Keytab used to obtain it
        acquired_at: UTC time of acquisition
    """

    principal: str
    keytab: str
    acquired_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class KinitCredentialProvider:
    """
    CredentialProvider that shells out to kinit/kdestroy.

    Success is determined by the exit status of the command.
    """

    def __init__(
        self,
        kinit_path: str = DEFAULT_KINIT_PATH,
        kdestroy_path: str = DEFAULT_KDESTROY_PATH,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
    ):
        self.kinit_path = kinit_path
        self.kdestroy_path = kdestroy_path
        self.timeout = timeout

    def _run(self, cmd: list[str], principal: Optional[str] = None) -> None:
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise CredentialError(
                f"{cmd[0]} timed out after {self.timeout}s", principal=principal, cause=e
            ) from e
        except OSError as e:
            raise CredentialError(
                f"{cmd[0]} could not be executed: {e}", principal=principal, cause=e
            ) from e

        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout or "").strip()
            raise CredentialError(
                f"{cmd[0]} exited with status {proc.returncode}"
                + (f": {detail}" if detail else ""),
                principal=principal,
            )

    def acquire(self, principal: str, keytab: str) -> None:
        self._run([self.kinit_path, principal, "-k", "-t", keytab], principal=principal)

    def release(self) -> None:
        self._run([self.kdestroy_path])


class CredentialManager:
    """
    Serialized acquire/release of the process-wide Kerberos ticket.

    Attributes:
        provider: CredentialProvider doing the actual work
        active_session: Session from the last successful acquire, or None
    """

    def __init__(
        self,
        provider: Optional[CredentialProvider] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.provider = provider or KinitCredentialProvider()
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._session: Optional[CredentialSession] = None

    @property
    def active_session(self) -> Optional[CredentialSession]:
        return self._session

    def acquire(self, principal: str, keytab: str) -> CredentialSession:
        """
        Obtain a Kerberos ticket for principal.

        Args:
            principal: Kerberos principal (e.g. "logs@EXAMPLE.COM")
            keytab: Path to the keytab holding the principal's key

        Returns:
            CredentialSession describing the ticket

        Raises:
            ConfigurationError: If principal or keytab is empty
            CredentialError: If the ticket could not be obtained
        """
        if not principal or not keytab:
            raise ConfigurationError(
                "Kerberos principal and keytab are both required to acquire a ticket"
            )

        with self._lock:
            self._logger.info(
                "Initializing Kerberos ticket for principal %s",
                principal,
                extra={"principal": principal, "keytab": keytab},
            )
            try:
                self.provider.acquire(principal, keytab)
            except Exception as e:
                self._session = None
                self._logger.error(
                    "Kinit failed, Exception: %s",
                    e,
                    extra={"principal": principal, "error_message": str(e)[:500]},
                )
                if isinstance(e, CredentialError):
                    raise
                raise CredentialError(
                    f"Kerberos ticket acquisition failed: {e}", principal=principal, cause=e
                ) from e

            self._session = CredentialSession(principal=principal, keytab=keytab)
            return self._session

    def release(self) -> None:
        """
        Destroy the Kerberos ticket(s), best effort.

        Failures are logged and never raised so shutdown can proceed. Safe to
        call when nothing was acquired.
        """
        with self._lock:
            self._logger.info("Destroying Kerberos ticket(s)")
            try:
                self.provider.release()
            except Exception as e:
                self._logger.error(
                    "Kdestroy failed, Exception: %s",
                    e,
                    extra={"error_message": str(e)[:500]},
                )
            finally:
                self._session = None

    @contextmanager
    def session(self, principal: str, keytab: str) -> Iterator[CredentialSession]:
        """Acquire a ticket for the duration of a with-block."""
        acquired = self.acquire(principal, keytab)
        try:
            yield acquired
        finally:
            self.release()


# Module-level singleton (optional - can create instances directly)
_default_manager: Optional[CredentialManager] = None
_default_manager_lock = threading.Lock()


def get_default_manager() -> CredentialManager:
    """
    Get or create the process-wide CredentialManager.

    Returns:
        Singleton CredentialManager using kinit/kdestroy
    """
    global _default_manager
    with _default_manager_lock:
        if _default_manager is None:
            _default_manager = CredentialManager()
        return _default_manager


def acquire_credentials(principal: str, keytab: str) -> CredentialSession:
    """Acquire a ticket through the default manager."""
    return get_default_manager().acquire(principal, keytab)


def release_credentials() -> None:
    """Release tickets through the default manager. Never raises."""
    get_default_manager().release()


__all__ = [
    "CredentialSession",
    "CredentialManager",
    "KinitCredentialProvider",
    "get_default_manager",
    "acquire_credentials",
    "release_credentials",
    "DEFAULT_KINIT_PATH",
    "DEFAULT_KDESTROY_PATH",
]
