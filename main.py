"""
main.py — System Update Status — CLI Entry Point.

Prints the update status report to stdout. Log output goes to stderr (and
optionally a rotating log file) so the report itself can be piped.

Usage:
    python main.py                              # framed status block
    python main.py --format plain               # label/value lines
    python main.py --format json                # machine-readable
    python main.py --config upkg.yaml --now 2025-12-11T00:00:00
    python main.py --log-level DEBUG
"""

import argparse
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml

from upkg import __version__
from upkg.config import ConfigError, load_config, parse_timestamp
from upkg.metrics import compute_status
from upkg.report import RENDERERS, print_report


_LOG_FORMAT = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def _configure_logging(level: str = "WARNING") -> None:
    """Configure the stderr stream handler.

    Args:
        level: Log level string.
    """
    effective_level = os.environ.get("LOG_LEVEL", level).upper()
    numeric = getattr(logging, effective_level, logging.WARNING)

    root = logging.getLogger()
    root.setLevel(numeric)

    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(_LOG_FORMAT)
    root.addHandler(sh)


def _add_file_handler(log_dir: str) -> Path:
    """Attach a rotating log file under `log_dir` to the root logger.

    Args:
        log_dir: Directory for log files.

    Returns:
        Path of the log file.
    """
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_file = Path(log_dir) / f"upkg_{datetime.today().strftime('%Y%m%d')}.log"
    fh = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=1024 * 1024, backupCount=7, encoding="utf-8"
    )
    fh.setFormatter(_LOG_FORMAT)
    logging.getLogger().addHandler(fh)
    return log_file


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="upkg",
        description="Print the system update status report.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  upkg
  upkg --format plain
  upkg --format json --now 2025-12-11T00:00:00
  upkg --config upkg.yaml --log-level DEBUG
        """,
    )
    parser.add_argument("--config", default=None,
                        help="Path to a YAML config (default: built-in values)")
    parser.add_argument("--format", default="status", choices=sorted(RENDERERS),
                        help="Report layout (default: status)")
    parser.add_argument("--now", default=None,
                        help="Evaluate the report at this ISO timestamp instead of the clock")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("-V", "--version", action="version",
                        version=f"upkg {__version__}")
    return parser.parse_args(argv)


def run(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Load the config, then build and print the report.

    Expects logging to be configured already, so config warnings (unknown
    keys, the loaded path) reach the handlers.

    Args:
        args: Parsed CLI arguments.
        logger: Configured logger.

    Returns:
        0 on success, 1 on error.
    """
    try:
        cfg = load_config(args.config)
        now = parse_timestamp(args.now) if args.now else None
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    except yaml.YAMLError as exc:
        logger.error("Config is not valid YAML: %s", exc)
        return 1
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    if cfg.log_dir:
        log_file = _add_file_handler(cfg.log_dir)
        logger.info("Logging to %s", log_file)

    record = compute_status(now, cfg)
    print_report(record, cfg, fmt=args.format)
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    """Parse args, configure logging, and print the report."""
    args = _parse_args(argv)
    _configure_logging(level=args.log_level)
    logger = logging.getLogger(__name__)
    logger.info("upkg v%s | %s", __version__, datetime.today().strftime("%Y-%m-%d %H:%M:%S"))
    sys.exit(run(args, logger))


if __name__ == "__main__":
    main()
