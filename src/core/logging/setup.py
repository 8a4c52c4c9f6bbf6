"""Logging setup and configuration."""

import io
import logging
import secrets
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.logging.context import set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter

# Default settings
DEFAULT_LOG_DIR = Path("logs")
DEFAULT_ROTATION_WHEN = "midnight"
DEFAULT_ROTATION_INTERVAL = 1
DEFAULT_BACKUP_COUNT = 7
DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG

# Noisy loggers to suppress
NOISY_LOGGERS = [
    "urllib3",
    "requests",
    "requests_kerberos",
    "spnego",
]


def get_log_file_path(log_dir: Path, name: str = "webhdfs_output") -> Path:
    """
    Build the log file path for a process.

    Args:
        log_dir: Base log directory
        name: Log file prefix

    Returns:
        Path like logs/webhdfs_output.log
    """
    return Path(log_dir) / f"{name}.log"


def setup_logging(
    name: str = "webhdfs_output",
    log_dir: Path | None = None,
    json_format: bool = True,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    file_level: int = DEFAULT_FILE_LEVEL,
    rotation_when: str = DEFAULT_ROTATION_WHEN,
    rotation_interval: int = DEFAULT_ROTATION_INTERVAL,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    suppress_noisy: bool = True,
    worker_id: str | None = None,
    log_to_stdout: bool = True,
) -> logging.Logger:
    """
    Configure logging with a console handler and an optional rotating file.

    Args:
        name: Logger name and log file prefix
        log_dir: Directory for log files (default: ./logs)
        json_format: Use JSON format for file logs (default: True)
        console_level: Console handler level (default: INFO)
        file_level: File handler level (default: DEBUG)
        rotation_when: When to rotate logs - 'midnight', 'H' (hourly), 'M' (minutes)
        rotation_interval: Interval for rotation (default: 1)
        backup_count: Number of backup files to keep (default: 7)
        suppress_noisy: Quiet down HTTP and SPNEGO library loggers
        worker_id: Worker identifier for context
        log_to_stdout: Send all log output to stdout only, skipping the file
            handler (default: True).

    Returns:
        Configured logger instance
    """
    if worker_id:
        set_log_context(worker_id=worker_id)

    console_formatter = ConsoleFormatter()
    if sys.platform == "win32":
        safe_stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
        console_handler = logging.StreamHandler(safe_stdout)
    else:
        console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.handlers.clear()

    log_file = None
    if log_to_stdout:
        console_handler.setLevel(min(console_level, file_level))
        root_logger.addHandler(console_handler)
    else:
        console_handler.setLevel(console_level)

        log_file = get_log_file_path(log_dir or DEFAULT_LOG_DIR, name)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        if json_format:
            file_formatter: logging.Formatter = JSONFormatter()
        else:
            file_formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
            )

        file_handler = TimedRotatingFileHandler(
            log_file,
            when=rotation_when,
            interval=rotation_interval,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(file_formatter)

        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    if log_file is None:
        logger.debug("Logging initialized: stdout-only mode")
    else:
        logger.debug(f"Logging initialized: file={log_file}, json={json_format}")

    return logger


def generate_session_id() -> str:
    """
    Generate unique output session identifier.

    Format: s-XXXXXXXX where XXXXXXXX is random hex.
    """
    return f"s-{secrets.token_hex(4)}"
