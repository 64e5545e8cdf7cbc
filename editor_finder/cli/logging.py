"""
Logging setup for editor_finder commands, with tqdm compatibility.
"""

import logging
import time
from pathlib import Path

from editor_finder.utils.tqdm_logging import TqdmLoggingHandler

NOISY_LOGGERS = ("urllib3", "requests", "charset_normalizer")


class FlushingFileHandler(logging.FileHandler):
    """File handler that flushes after every record so logs survive a crash."""

    def emit(self, record):
        super().emit(record)
        self.flush()


def setup_logging(
    command_name: str,
    execute: bool = False,
    verbose: bool = False,
    log_dir: Path = Path("logs"),
) -> logging.Logger:
    """
    Configure logging for a command.

    Args:
        command_name: Used as the logger name and the log file prefix
        execute: If True, also write DEBUG logs to a timestamped file
        verbose: Show DEBUG on the console
        log_dir: Directory for log files

    Returns:
        The command's logger
    """
    console_level = logging.DEBUG if verbose else logging.INFO
    console_handler = TqdmLoggingHandler(level=console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    handlers: list[logging.Handler] = [console_handler]
    log_file = None
    if execute:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{command_name}_{time.strftime('%Y%m%d_%H%M%S')}.log"
        file_handler = FlushingFileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    # Package and command loggers share the same handlers
    for name in ("editor_finder", command_name):
        configured = logging.getLogger(name)
        configured.setLevel(logging.DEBUG)
        configured.handlers = list(handlers)
        configured.propagate = False

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.ERROR)

    logger = logging.getLogger(command_name)
    if log_file is not None:
        logger.info(f"Log file: {log_file}")
    return logger


def print_header(title: str, dry_run: bool = False, logger: logging.Logger | None = None):
    """Log a standard section header."""
    logger = logger or logging.getLogger(__name__)
    logger.info("=" * 70)
    logger.info(f"{title} (Dry Run)" if dry_run else title)
    logger.info("=" * 70)
