"""
pytest configuration for the WebHDFS output tests.

Adds src directory to Python path for imports and provides shared fakes.
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


class FakeCredentialProvider:
    """In-memory CredentialProvider recording kinit/kdestroy calls."""

    def __init__(self, acquire_error=None, release_error=None):
        self.calls = []
        self.acquire_error = acquire_error
        self.release_error = release_error

    def acquire(self, principal, keytab):
        self.calls.append(("acquire", principal, keytab))
        if self.acquire_error is not None:
            raise self.acquire_error

    def release(self):
        self.calls.append(("release",))
        if self.release_error is not None:
            raise self.release_error


def make_response(status_code=200, json_body=None, headers=None, content=b""):
    """Build a requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.headers.update(headers or {})
    if json_body is not None:
        import json

        response._content = json.dumps(json_body).encode("utf-8")
        response.headers.setdefault("Content-Type", "application/json")
    else:
        response._content = content
    return response


def remote_exception(status_code, exception, message="failure"):
    """Response carrying a WebHDFS RemoteException body."""
    return make_response(
        status_code,
        {
            "RemoteException": {
                "exception": exception,
                "javaClassName": f"org.apache.hadoop.{exception}",
                "message": message,
            }
        },
    )


@pytest.fixture
def fake_provider():
    return FakeCredentialProvider()


@pytest.fixture
def mock_session():
    """requests.Session stand-in; set .request.return_value / side_effect."""
    return Mock(spec=requests.Session)


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def remote_error_factory():
    return remote_exception


@pytest.fixture
def provider_factory():
    return FakeCredentialProvider
