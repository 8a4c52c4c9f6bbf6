"""
Tests for exception hierarchy and error classification.
"""

from core.errors.exceptions import (
    AuthError,
    ConfigurationError,
    ConnectionError,
    ConnectivityError,
    CredentialError,
    DependencyError,
    ErrorCategory,
    HdfsAuthError,
    HdfsFileNotFoundError,
    HdfsKnownError,
    HdfsRemoteError,
    HdfsStandbyError,
    PermanentError,
    PipelineError,
    TimeoutError,
    TransientError,
    classify_exception,
    classify_http_status,
    wrap_exception,
)


class TestErrorCategory:
    """Test ErrorCategory enum."""

    def test_all_categories_exist(self):
        assert ErrorCategory.TRANSIENT.value == "transient"
        assert ErrorCategory.AUTH.value == "auth"
        assert ErrorCategory.PERMANENT.value == "permanent"
        assert ErrorCategory.UNKNOWN.value == "unknown"


class TestPipelineError:
    """Test base PipelineError class."""

    def test_basic_error(self):
        err = PipelineError("Something went wrong")
        assert err.message == "Something went wrong"
        assert err.cause is None
        assert err.context == {}
        assert err.category == ErrorCategory.UNKNOWN

    def test_error_with_cause(self):
        cause = ValueError("Invalid value")
        err = PipelineError("Wrapper message", cause=cause)
        assert err.cause is cause
        assert str(err) == "Wrapper message | Caused by: Invalid value"

    def test_error_with_context(self):
        err = PipelineError("Error", context={"hdfs_path": "/logs/a", "port": 50070})
        assert err.context["hdfs_path"] == "/logs/a"
        assert err.context["port"] == 50070

    def test_only_transient_is_retryable(self):
        assert PipelineError("Error").is_retryable is False
        assert TransientError("Error").is_retryable is True
        assert AuthError("Error").is_retryable is False
        assert PermanentError("Error").is_retryable is False


class TestStartupErrors:

    def test_configuration_error_is_permanent(self):
        err = ConfigurationError("bad compression")
        assert err.category == ErrorCategory.PERMANENT
        assert not err.is_retryable

    def test_dependency_error_names_module(self):
        cause = ImportError("No module named 'snappy'")
        err = DependencyError("snappy", cause=cause)
        assert err.module == "snappy"
        assert err.cause is cause
        assert "Module snappy could not be loaded" in str(err)
        assert err.category == ErrorCategory.PERMANENT

    def test_credential_error_is_auth(self):
        err = CredentialError("kinit failed", principal="logs@EXAMPLE.COM")
        assert isinstance(err, AuthError)
        assert err.principal == "logs@EXAMPLE.COM"
        assert err.category == ErrorCategory.AUTH
        assert not err.is_retryable

    def test_connectivity_error_carries_host_and_port(self):
        cause = ConnectionError("refused")
        err = ConnectivityError("nn1", 50070, cause=cause)
        assert err.host == "nn1"
        assert err.port == 50070
        assert "nn1:50070" in str(err)
        assert err.cause is cause

    def test_connectivity_error_category_follows_cause(self):
        assert ConnectivityError("nn1", 1, ConnectionError("x")).category == ErrorCategory.TRANSIENT
        assert ConnectivityError("nn1", 1, HdfsAuthError("x")).category == ErrorCategory.AUTH
        assert ConnectivityError("nn1", 1).category == ErrorCategory.UNKNOWN


class TestHdfsErrors:

    def test_remote_error_fields(self):
        err = HdfsRemoteError(
            "boom", exception="IOException", status_code=500, context={"hdfs_op": "CREATE"}
        )
        assert err.exception == "IOException"
        assert err.status_code == 500
        assert err.context["hdfs_op"] == "CREATE"
        assert err.context["status_code"] == 500
        assert err.category == ErrorCategory.PERMANENT

    def test_subclass_categories(self):
        assert HdfsFileNotFoundError("x").category == ErrorCategory.PERMANENT
        assert HdfsAuthError("x").category == ErrorCategory.AUTH
        assert HdfsKnownError("x").is_retryable is True
        assert HdfsStandbyError("x").is_retryable is False
        assert not isinstance(HdfsStandbyError("x"), HdfsKnownError)


class TestClassifyHttpStatus:

    def test_success_is_not_an_error(self):
        assert classify_http_status(200) == ErrorCategory.UNKNOWN

    def test_unauthorized_is_auth(self):
        assert classify_http_status(401) == ErrorCategory.AUTH

    def test_throttle_and_timeout_are_transient(self):
        assert classify_http_status(408) == ErrorCategory.TRANSIENT
        assert classify_http_status(429) == ErrorCategory.TRANSIENT

    def test_other_client_errors_are_permanent(self):
        assert classify_http_status(400) == ErrorCategory.PERMANENT
        assert classify_http_status(403) == ErrorCategory.PERMANENT
        assert classify_http_status(404) == ErrorCategory.PERMANENT

    def test_gateway_errors_are_transient(self):
        for status in (502, 503, 504):
            assert classify_http_status(status) == ErrorCategory.TRANSIENT

    def test_internal_server_error_is_unknown(self):
        assert classify_http_status(500) == ErrorCategory.UNKNOWN


class TestClassifyException:

    def test_pipeline_error_keeps_category(self):
        assert classify_exception(AuthError("x")) == ErrorCategory.AUTH

    def test_connection_refused_is_transient(self):
        assert classify_exception(OSError("Connection refused")) == ErrorCategory.TRANSIENT

    def test_timeout_is_transient(self):
        assert classify_exception(OSError("read timed out")) == ErrorCategory.TRANSIENT

    def test_unauthorized_is_auth(self):
        assert classify_exception(RuntimeError("401 Unauthorized")) == ErrorCategory.AUTH

    def test_forbidden_is_permanent(self):
        assert classify_exception(RuntimeError("403 Forbidden")) == ErrorCategory.PERMANENT

    def test_unrecognized_is_unknown(self):
        assert classify_exception(ValueError("odd")) == ErrorCategory.UNKNOWN


class TestWrapException:

    def test_pipeline_error_returned_as_is(self):
        err = TransientError("x")
        assert wrap_exception(err, context={"a": 1}) is err
        assert err.context["a"] == 1

    def test_timeout_wrapped(self):
        wrapped = wrap_exception(OSError("operation timed out"))
        assert isinstance(wrapped, TimeoutError)
        assert wrapped.context["error_type"] == "timeout"

    def test_connection_wrapped(self):
        wrapped = wrap_exception(OSError("Connection reset by peer"))
        assert isinstance(wrapped, ConnectionError)

    def test_auth_wrapped(self):
        assert isinstance(wrap_exception(RuntimeError("authentication failed")), AuthError)

    def test_permanent_wrapped(self):
        assert isinstance(wrap_exception(RuntimeError("permission denied")), PermanentError)

    def test_default_class_used_for_unknown(self):
        wrapped = wrap_exception(ValueError("odd"), default_class=HdfsRemoteError)
        assert type(wrapped) is HdfsRemoteError
        assert isinstance(wrapped.cause, ValueError)
