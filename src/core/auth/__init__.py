"""
Authentication module.

Provides Kerberos ticket lifecycle management for SPNEGO-authenticated
WebHDFS access.

Components:
    - CredentialSession: explicitly owned record of an acquired ticket
    - CredentialManager: serialized acquire/release with logging
    - KinitCredentialProvider: kinit/kdestroy process boundary
"""

from .kerberos import (
    DEFAULT_KDESTROY_PATH,
    DEFAULT_KINIT_PATH,
    CredentialManager,
    CredentialSession,
    KinitCredentialProvider,
    acquire_credentials,
    get_default_manager,
    release_credentials,
)

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
