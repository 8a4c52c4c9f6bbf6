import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from config.config import (
    WebHdfsConfig,
    _expand_env_vars,
    get_config,
    load_config,
    load_yaml,
    reset_config,
    set_config,
)
from core.errors.exceptions import ConfigurationError
from webhdfs_output.helpers import ClientConfig, KerberosAuth, SimpleAuth


def _write_config(tmp_path, settings):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"webhdfs": settings}))
    return path


# =========================================================================
# load_yaml / env expansion
# =========================================================================


class TestLoadYaml:
    def test_returns_empty_dict_for_nonexistent_file(self):
        assert load_yaml(Path("/nonexistent/path/config.yaml")) == {}

    def test_loads_yaml_file(self, tmp_path):
        config_file = tmp_path / "test.yaml"
        config_file.write_text("key: value\nnested:\n  a: 1\n")
        assert load_yaml(config_file) == {"key": "value", "nested": {"a": 1}}

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert load_yaml(config_file) == {}


class TestExpandEnvVars:
    @patch.dict(os.environ, {"WEBHDFS_HOST": "nn1"})
    def test_expands_variable(self):
        assert _expand_env_vars({"host": "${WEBHDFS_HOST}"}) == {"host": "nn1"}

    @patch.dict(os.environ, {}, clear=True)
    def test_uses_default(self):
        assert _expand_env_vars("${WEBHDFS_PORT:-50070}") == "50070"

    @patch.dict(os.environ, {}, clear=True)
    def test_empty_default(self):
        assert _expand_env_vars("${STANDBY:-}") == ""

    @patch.dict(os.environ, {}, clear=True)
    def test_unset_without_default_left_as_is(self):
        assert _expand_env_vars("${MISSING}") == "${MISSING}"

    @patch.dict(os.environ, {"A": "x"})
    def test_nested_structures(self):
        assert _expand_env_vars({"a": ["${A}", 1], "b": {"c": "${A}"}}) == {
            "a": ["x", 1],
            "b": {"c": "x"},
        }


# =========================================================================
# WebHdfsConfig
# =========================================================================


class TestWebHdfsConfigDefaults:
    def test_defaults(self):
        config = WebHdfsConfig(host="nn1", user="logs")
        assert config.port == 50070
        assert config.use_httpfs is False
        assert config.open_timeout == 30
        assert config.read_timeout == 30
        assert config.retry_known_errors is True
        assert config.retry_interval == 0.5
        assert config.retry_times == 5
        assert config.compression == "none"
        assert config.snappy_bufsize == 32768
        assert config.snappy_format == "stream"
        assert config.use_kerberos_auth is False
        assert config.namenode == "nn1:50070"
        assert not config.has_standby

    def test_string_coercion(self):
        config = WebHdfsConfig(
            host="nn1",
            user="logs",
            port="14000",
            use_kerberos_auth="false",
            retry_known_errors="no",
            snappy_bufsize="1024",
            retry_interval="2",
            standby_host="",
            compression="GZIP",
        )
        assert config.port == 14000
        assert config.use_kerberos_auth is False
        assert config.retry_known_errors is False
        assert config.snappy_bufsize == 1024
        assert config.retry_interval == 2.0
        assert config.standby_host is None
        assert config.compression == "gzip"

    def test_ssl_verify_accepts_bundle_path(self):
        assert WebHdfsConfig(ssl_verify="/etc/ssl/ca.pem").ssl_verify == "/etc/ssl/ca.pem"
        assert WebHdfsConfig(ssl_verify="false").ssl_verify is False

    def test_invalid_bool(self):
        with pytest.raises(ConfigurationError):
            WebHdfsConfig(use_httpfs="maybe")

    def test_invalid_number(self):
        with pytest.raises(ConfigurationError):
            WebHdfsConfig(port="not-a-port")

    def test_empty_retry_settings_left_unset(self):
        config = WebHdfsConfig(retry_interval="", retry_times=None)
        assert config.retry_interval is None
        assert config.retry_times is None


class TestValidate:
    def test_valid_simple(self):
        WebHdfsConfig(host="nn1", user="logs").validate()

    def test_valid_kerberos(self):
        WebHdfsConfig(
            host="nn1", use_kerberos_auth=True, kerberos_principal="p@R", kerberos_keytab="/k"
        ).validate()

    @pytest.mark.parametrize(
        "settings,match",
        [
            ({"user": "logs"}, "host"),
            ({"host": "nn1"}, "user"),
            ({"host": "nn1", "user": "logs", "compression": "lz4"}, "compression"),
            ({"host": "nn1", "user": "logs", "snappy_format": "framed"}, "snappy_format"),
            ({"host": "nn1", "user": "logs", "snappy_bufsize": 0}, "snappy_bufsize"),
            ({"host": "nn1", "user": "logs", "port": 0}, "port"),
            ({"host": "nn1", "user": "logs", "open_timeout": 0}, "timeout"),
            ({"host": "nn1", "user": "logs", "retry_times": -1}, "retry_times"),
            ({"host": "nn1", "use_kerberos_auth": True, "kerberos_principal": "p@R"}, "keytab"),
            ({"host": "nn1", "use_kerberos_auth": True, "kerberos_keytab": "/k"}, "principal"),
        ],
    )
    def test_rejects(self, settings, match):
        with pytest.raises(ConfigurationError, match=match):
            WebHdfsConfig(**settings).validate()


class TestToClientConfig:
    def test_simple(self):
        client_config = WebHdfsConfig(host="nn1", user="logs", retry_times=3).to_client_config()
        assert isinstance(client_config, ClientConfig)
        assert client_config.host == "nn1"
        assert client_config.retry_times == 3
        assert client_config.auth_mode == SimpleAuth("logs")

    def test_kerberos(self):
        client_config = WebHdfsConfig(
            host="nn1",
            user="ignored",
            use_kerberos_auth=True,
            kerberos_principal="p@R",
            kerberos_keytab="/k",
        ).to_client_config()
        assert client_config.auth_mode == KerberosAuth("/k", "HTTP")

    def test_keytab_ignored_without_kerberos(self):
        client_config = WebHdfsConfig(host="nn1", user="logs", kerberos_keytab="/k").to_client_config()
        assert client_config.kerberos_keytab is None

    def test_standby(self):
        config = WebHdfsConfig(host="nn1", user="logs", standby_host="nn2", port=50070)
        standby = config.to_client_config(standby=True)
        assert standby.host == "nn2"
        assert standby.port == 50070

    def test_standby_port_override(self):
        config = WebHdfsConfig(host="nn1", user="logs", standby_host="nn2", standby_port=50071)
        assert config.to_client_config(standby=True).port == 50071

    def test_standby_requires_host(self):
        with pytest.raises(ConfigurationError):
            WebHdfsConfig(host="nn1", user="logs").to_client_config(standby=True)


# =========================================================================
# load_config
# =========================================================================


class TestLoadConfig:
    def test_loads_and_validates(self, tmp_path):
        path = _write_config(tmp_path, {"host": "nn1", "user": "logs", "compression": "snappy"})
        config = load_config(path)
        assert config.host == "nn1"
        assert config.compression == "snappy"

    @patch.dict(os.environ, {"WEBHDFS_HOST": "nn9", "WEBHDFS_USE_KERBEROS": "true"})
    def test_env_expansion(self, tmp_path):
        path = _write_config(
            tmp_path,
            {
                "host": "${WEBHDFS_HOST}",
                "use_kerberos_auth": "${WEBHDFS_USE_KERBEROS:-false}",
                "kerberos_principal": "p@R",
                "kerberos_keytab": "/k",
            },
        )
        config = load_config(path)
        assert config.host == "nn9"
        assert config.use_kerberos_auth is True

    def test_overrides(self, tmp_path):
        path = _write_config(tmp_path, {"host": "nn1", "user": "logs"})
        assert load_config(path, overrides={"port": 14000}).port == 14000

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_missing_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("other: {}\n")
        with pytest.raises(ConfigurationError, match="webhdfs"):
            load_config(path)

    def test_unknown_key(self, tmp_path):
        path = _write_config(tmp_path, {"host": "nn1", "user": "logs", "hostname": "x"})
        with pytest.raises(ConfigurationError, match="hostname"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = _write_config(tmp_path, {"host": "nn1", "user": "logs", "compression": "zstd"})
        with pytest.raises(ConfigurationError):
            load_config(path)

    @patch.dict(os.environ, {}, clear=True)
    def test_bundled_config_loads(self):
        config = load_config()
        assert config.host == "localhost"
        assert config.user == "logs"
        assert config.standby_host is None


class TestConfigSingleton:
    def setup_method(self):
        reset_config()

    def teardown_method(self):
        reset_config()

    def test_set_and_get(self):
        config = WebHdfsConfig(host="nn1", user="logs")
        set_config(config)
        assert get_config() is config

    def test_get_loads_default_once(self):
        sentinel = WebHdfsConfig(host="nn1", user="logs")
        with patch("config.config.load_config", return_value=sentinel) as mock_load:
            assert get_config() is sentinel
            assert get_config() is sentinel
        mock_load.assert_called_once()
