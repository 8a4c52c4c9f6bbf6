"""Log formatters for JSON and console output."""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

from core.logging.context import get_log_context
from core.utils.json_serializers import json_serializer


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter with context injection.

    Produces one JSON object per line for easy parsing with jq/grep.
    Sanitizes URLs to remove delegation tokens before logging.
    """

    # Fields to extract from LogRecord extras
    EXTRA_FIELDS = [
        "duration_ms",
        # HTTP
        "http_status",
        "http_method",
        "http_url",
        # Errors
        "error_category",
        "error_message",
        "error_type",
        "error",
        "exception",
        # Resilience
        "attempt",
        "max_attempts",
        "total_attempts",
        "delay_seconds",
        "callback_error",
        # WebHDFS
        "host",
        "port",
        "hdfs_op",
        "hdfs_path",
        "bytes_written",
        "auth_mode",
        "compression",
        "chunk_size",
        # Credentials
        "principal",
        "keytab",
        "returncode",
        # Operation tracking
        "operation",
        "module_name",
    ]

    # Numeric fields keep their numeric type in the output
    NUMERIC_FIELDS = {
        "duration_ms": float,
        "delay_seconds": float,
        "attempt": int,
        "max_attempts": int,
        "total_attempts": int,
        "http_status": int,
        "port": int,
        "bytes_written": int,
        "chunk_size": int,
        "returncode": int,
    }

    # Fields that contain URLs and should be sanitized
    URL_FIELDS = ["http_url"]

    # Delegation tokens and passwords in WebHDFS query strings
    SENSITIVE_PARAMS_PATTERN = re.compile(
        r"([?&])(delegation|token|password|secret)=[^&]*",
        re.IGNORECASE,
    )

    def _sanitize_url(self, url: str) -> str:
        return self.SENSITIVE_PARAMS_PATTERN.sub(r"\1\2=[REDACTED]", url)

    def _sanitize_value(self, key: str, value: Any) -> Any:
        if key in self.URL_FIELDS and isinstance(value, str):
            return self._sanitize_url(value)
        return value

    def _ensure_type(self, field: str, value: Any) -> Any:
        if field not in self.NUMERIC_FIELDS or value is None:
            return value

        expected_type = self.NUMERIC_FIELDS[field]
        try:
            return expected_type(value)
        except (ValueError, TypeError):
            return None

    @staticmethod
    def _base_log_entry(record: logging.LogRecord) -> dict[str, Any]:
        return {
            "ts": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

    @staticmethod
    def _inject_context(log_entry: dict[str, Any], log_context: dict[str, Any]) -> None:
        for field in ("session_id", "namenode", "worker_id"):
            if log_context[field]:
                log_entry[field] = log_context[field]

    def _inject_extra_fields(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                typed_value = self._ensure_type(field, value)
                log_entry[field] = self._sanitize_value(field, typed_value)

    def _inject_exception(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        if not record.exc_info:
            return

        exc_type, exc_value, _ = record.exc_info
        log_entry["exception"] = {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc_value) if exc_value else None,
            "stacktrace": self.formatException(record.exc_info),
        }

    def format(self, record: logging.LogRecord) -> str:
        log_entry = self._base_log_entry(record)
        self._inject_context(log_entry, get_log_context())

        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            log_entry["file"] = f"{record.filename}:{record.lineno}"

        self._inject_extra_fields(log_entry, record)
        self._inject_exception(log_entry, record)

        return json.dumps(log_entry, default=json_serializer, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter with color-coded log levels.

    Colors are auto-disabled when output is not a TTY (pipes, files).
    """

    # ANSI color codes
    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._use_colors = sys.stdout.isatty()

    def _format_level_name(self, record: logging.LogRecord) -> str:
        level_name = record.levelname
        color = self.COLORS.get(record.levelno, "")
        if not self._use_colors or not color:
            return level_name
        return f"{color}{level_name}{self.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output with optional color coding."""
        log_context = get_log_context()

        parts = [
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            self._format_level_name(record),
        ]
        if log_context["namenode"]:
            parts.append(f"[{log_context['namenode']}]")
        if log_context["session_id"]:
            parts.append(f"[{log_context['session_id'][:8]}]")

        message = f"{' - '.join(parts)} - {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message
