"""WebHDFS output command line. Use --help for usage."""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from config.config import DEFAULT_CONFIG_FILE, load_config
from core.errors.exceptions import PipelineError
from core.logging.context import set_log_context
from core.logging.setup import generate_session_id, setup_logging
from core.logging.utilities import log_exception
from webhdfs_output.output import WebHdfsOutput

# Project root directory (where .env file is located)
# __main__.py is at src/webhdfs_output/__main__.py, so root is 3 levels up
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Placeholder logger until setup_logging() is called in main()
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="webhdfs_output",
        description="Check WebHDFS connectivity or write a file through the WebHDFS output",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run the startup sequence (kinit, client setup, namenode check)
    python -m webhdfs_output check

    # Compress and append a local file to HDFS
    python -m webhdfs_output put ./app.log /logs/app/2024-01-01.log

    # Use another config file
    python -m webhdfs_output --config /etc/webhdfs/config.yaml check
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config YAML (default: WEBHDFS_CONFIG env var or src/config/config.yaml)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Write JSON logs to this directory instead of stdout only",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("check", help="Run the startup sequence and exit")

    put = subparsers.add_parser("put", help="Compress and write a local file")
    put.add_argument("local_path", type=Path, help="Local file to read")
    put.add_argument("remote_path", help="HDFS destination (extension is added)")

    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    config_path = args.config or Path(os.getenv("WEBHDFS_CONFIG", str(DEFAULT_CONFIG_FILE)))

    try:
        config = load_config(config_path)
        with WebHdfsOutput(config) as output:
            if args.command == "check":
                logger.info("WebHDFS check passed for %s", config.namenode)
                return 0

            data = args.local_path.read_bytes()
            target = output.write(args.remote_path, data)
            logger.info(
                "Wrote %s to %s",
                args.local_path,
                target,
                extra={"hdfs_path": target, "bytes_written": len(data)},
            )
            return 0
    except (PipelineError, OSError) as e:
        log_exception(logger, e, f"WebHDFS output {args.command} failed: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    load_dotenv(PROJECT_ROOT / ".env")
    args = parse_args(argv)

    level = getattr(logging, args.log_level)
    setup_logging(
        name="webhdfs_output",
        log_dir=Path(args.log_dir) if args.log_dir else None,
        console_level=level,
        file_level=level,
        log_to_stdout=args.log_dir is None,
    )
    set_log_context(session_id=generate_session_id())

    return run(args)


if __name__ == "__main__":
    sys.exit(main())
