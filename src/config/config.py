"""WebHDFS output configuration from YAML file.

Loads from config/config.yaml with all settings under a single ``webhdfs:``
section:
- Namenode (and optional standby namenode) address
- Authentication: simple user name or Kerberos keytab/principal
- Payload compression and Snappy framing
- Timeouts, retry policy and SSL

Environment variables ARE supported using ${VAR_NAME} and
${VAR_NAME:-default} syntax in YAML files.
"""

import logging
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from core.errors.exceptions import ConfigurationError

# Configure module logger
logger = logging.getLogger(__name__)

VALID_COMPRESSION = ("none", "gzip", "snappy")
VALID_SNAPPY_FORMATS = ("stream", "file")

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _as_bool(value: Any, name: str) -> bool:
    """Coerce YAML/env values; bool('false') would be True."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _as_optional(value: Any) -> Any:
    """Treat empty strings (unset env defaults) as missing."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Default config file: config/config.yaml in src/ directory
DEFAULT_CONFIG_FILE = Path(__file__).parent.parent / "config" / "config.yaml"


@dataclass
class WebHdfsConfig:
    """WebHDFS output configuration.

    Configuration structure:
        webhdfs:
          host: namenode.example.com
          port: 50070
          standby_host: namenode2.example.com   # optional failover target
          user: logs
          use_kerberos_auth: false
          kerberos_principal: logs@EXAMPLE.COM
          kerberos_keytab: /etc/security/logs.keytab
          compression: snappy                   # none | gzip | snappy
          snappy_format: stream                 # stream | file
          snappy_bufsize: 32768
          retry_known_errors: true
          retry_interval: 0.5
          retry_times: 5
    """

    host: str = ""
    port: int = 50070
    standby_host: Optional[str] = None
    standby_port: Optional[int] = None
    user: Optional[str] = None
    use_httpfs: bool = False

    # Authentication
    use_kerberos_auth: bool = False
    kerberos_principal: Optional[str] = None
    kerberos_keytab: Optional[str] = None
    kerberos_service_principal: Optional[str] = None

    # SSL
    use_ssl_auth: bool = False
    ssl_verify: Union[bool, str] = True
    ssl_cert: Optional[str] = None
    ssl_key: Optional[str] = None

    # Payload encoding
    compression: str = "none"
    snappy_format: str = "stream"
    snappy_bufsize: int = 32768

    # Timeouts (seconds) and retry policy
    open_timeout: float = 30
    read_timeout: float = 30
    retry_known_errors: bool = True
    retry_interval: Optional[float] = 0.5
    retry_times: Optional[int] = 5

    def __post_init__(self):
        """Ensure proper types from YAML/env vars."""
        for name in ("standby_host", "user", "kerberos_principal", "kerberos_keytab",
                     "kerberos_service_principal", "ssl_cert", "ssl_key"):
            setattr(self, name, _as_optional(getattr(self, name)))

        for name in ("use_httpfs", "use_kerberos_auth", "use_ssl_auth", "retry_known_errors"):
            setattr(self, name, _as_bool(getattr(self, name), name))

        # ssl_verify may be a CA bundle path
        if isinstance(self.ssl_verify, str) and self.ssl_verify.strip().lower() in (
            _TRUE_STRINGS | _FALSE_STRINGS
        ):
            self.ssl_verify = _as_bool(self.ssl_verify, "ssl_verify")

        self.compression = str(self.compression).strip().lower()
        self.snappy_format = str(self.snappy_format).strip().lower()

        try:
            self.port = int(self.port)
            self.standby_port = (
                int(self.standby_port) if _as_optional(self.standby_port) is not None else None
            )
            self.snappy_bufsize = int(self.snappy_bufsize)
            self.open_timeout = float(self.open_timeout)
            self.read_timeout = float(self.read_timeout)
            self.retry_interval = (
                float(self.retry_interval) if _as_optional(self.retry_interval) is not None else None
            )
            self.retry_times = (
                int(self.retry_times) if _as_optional(self.retry_times) is not None else None
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid numeric setting in webhdfs section: {e}", cause=e) from e

    @property
    def namenode(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def has_standby(self) -> bool:
        return bool(self.standby_host)

    def validate(self) -> None:
        """Validate configuration for correctness and constraints.

        Checks required fields, identity, enum values and numeric ranges.
        """
        if not self.host:
            raise ConfigurationError("host is required in webhdfs section")

        if self.port <= 0:
            raise ConfigurationError(f"port must be > 0, got {self.port}")

        if self.compression not in VALID_COMPRESSION:
            raise ConfigurationError(
                f"compression must be one of {list(VALID_COMPRESSION)}, got '{self.compression}'"
            )

        if self.snappy_format not in VALID_SNAPPY_FORMATS:
            raise ConfigurationError(
                f"snappy_format must be one of {list(VALID_SNAPPY_FORMATS)}, "
                f"got '{self.snappy_format}'"
            )

        if self.snappy_bufsize <= 0:
            raise ConfigurationError(f"snappy_bufsize must be > 0, got {self.snappy_bufsize}")

        if self.use_kerberos_auth:
            if not self.kerberos_keytab:
                raise ConfigurationError("kerberos_keytab is required when use_kerberos_auth is true")
            if not self.kerberos_principal:
                raise ConfigurationError(
                    "kerberos_principal is required when use_kerberos_auth is true"
                )
        elif not self.user:
            raise ConfigurationError("user is required unless use_kerberos_auth is true")

        if self.open_timeout <= 0 or self.read_timeout <= 0:
            raise ConfigurationError("open_timeout and read_timeout must be > 0")

        if self.retry_interval is not None and self.retry_interval < 0:
            raise ConfigurationError(f"retry_interval must be >= 0, got {self.retry_interval}")

        if self.retry_times is not None and self.retry_times < 0:
            raise ConfigurationError(f"retry_times must be >= 0, got {self.retry_times}")

    def to_client_config(self, standby: bool = False):
        """Resolve the ClientConfig for the active (or standby) namenode."""
        from webhdfs_output.helpers import ClientConfig

        if standby:
            if not self.has_standby:
                raise ConfigurationError("No standby namenode configured")
            return ClientConfig.from_settings(
                self, host=self.standby_host, port=self.standby_port or self.port
            )
        return ClientConfig.from_settings(self)


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> WebHdfsConfig:
    """Load WebHDFS configuration from config.yaml file.

    Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.

    Raises:
        ConfigurationError: If the file or its webhdfs section is missing,
            an unknown key is present, or validation fails
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    logger.info("Loading configuration from file: %s", config_path)
    yaml_data = _expand_env_vars(load_yaml(config_path))

    if "webhdfs" not in yaml_data or not isinstance(yaml_data["webhdfs"], dict):
        raise ConfigurationError("Invalid config file: missing 'webhdfs:' section")

    settings = dict(yaml_data["webhdfs"])
    if overrides:
        logger.debug("Applying overrides: %s", list(overrides.keys()))
        settings.update(overrides)

    known = {f.name for f in fields(WebHdfsConfig)}
    unknown = sorted(set(settings) - known)
    if unknown:
        raise ConfigurationError(f"Unknown settings in webhdfs section: {unknown}")

    config = WebHdfsConfig(**settings)

    logger.debug(
        "Configuration loaded",
        extra={
            "host": config.host,
            "port": config.port,
            "auth_mode": "kerberos" if config.use_kerberos_auth else "simple",
            "compression": config.compression,
        },
    )
    config.validate()
    return config


_webhdfs_config: Optional[WebHdfsConfig] = None


def get_config() -> WebHdfsConfig:
    """Get or load the singleton WebHDFS config instance."""
    global _webhdfs_config
    if _webhdfs_config is None:
        _webhdfs_config = load_config()
    return _webhdfs_config


def set_config(config: WebHdfsConfig) -> None:
    """Set the singleton config instance (useful for testing)."""
    global _webhdfs_config
    _webhdfs_config = config


def reset_config() -> None:
    """Reset the singleton config instance (forces reload on next get_config() call)."""
    global _webhdfs_config
    _webhdfs_config = None
