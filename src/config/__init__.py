"""Configuration loading for the WebHDFS output.

Configuration is loaded from a single YAML file with a ``webhdfs:`` section.
${VAR} and ${VAR:-default} references are expanded from the environment.

Usage:
    >>> from config import load_config
    >>> config = load_config(Path("config/config.yaml"))
    >>> client_config = config.to_client_config()
"""

from config.config import (
    DEFAULT_CONFIG_FILE,
    WebHdfsConfig,
    get_config,
    load_config,
    load_yaml,
    reset_config,
    set_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "WebHdfsConfig",
    "get_config",
    "load_config",
    "load_yaml",
    "reset_config",
    "set_config",
]
