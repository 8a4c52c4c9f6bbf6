"""Tests for core.types module."""

from core.auth.kerberos import KinitCredentialProvider
from core.types import CredentialProvider, ErrorCategory


class TestErrorCategory:
    def test_values(self):
        assert ErrorCategory.TRANSIENT.value == "transient"
        assert ErrorCategory.AUTH.value == "auth"
        assert ErrorCategory.PERMANENT.value == "permanent"
        assert ErrorCategory.UNKNOWN.value == "unknown"

    def test_all_members(self):
        expected = {"TRANSIENT", "AUTH", "PERMANENT", "UNKNOWN"}
        assert set(ErrorCategory.__members__.keys()) == expected

    def test_from_value(self):
        assert ErrorCategory("transient") is ErrorCategory.TRANSIENT


class TestProtocols:
    def test_credential_provider_methods(self):
        assert hasattr(CredentialProvider, "acquire")
        assert hasattr(CredentialProvider, "release")

    def test_kinit_provider_satisfies_protocol(self):
        provider: CredentialProvider = KinitCredentialProvider()
        assert callable(provider.acquire)
        assert callable(provider.release)
