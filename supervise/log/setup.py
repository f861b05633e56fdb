import logging
import sys
from pathlib import Path
from typing import Optional

from supervise.config import effective_settings as config
from supervise.supervisor.errors import LogSetupError

VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


class MainFormatter(logging.Formatter):
    """The formatter shared by the console and the log file."""

    def __init__(self) -> None:
        super().__init__(fmt=config.LOG_FORMAT)


def level_for_verbosity(verbosity: int) -> int:
    """Maps the number of -v flags to a logging level."""
    return VERBOSITY_LEVELS[max(0, min(verbosity, len(VERBOSITY_LEVELS) - 1))]


def setup_logging(verbosity: int = 0, log_file: Optional[Path] = None) -> None:
    """
    Configures the root logger for the supervisor.
    This sets up a console handler on stderr and optionally a file handler,
    clearing any previously configured handlers to prevent duplication.

    :param verbosity: How many times -v was given; 0 logs warnings and above.
    :param log_file: A file that diagnostics are appended to.
    :raises LogSetupError: If the log file cannot be opened.
    """
    level = level_for_verbosity(verbosity)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear any existing handlers to prevent re-adding them on re-runs
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    # --- Console Handler ---
    # stderr keeps diagnostics apart from the child's stdout.
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(MainFormatter())
    root_logger.addHandler(console_handler)

    # --- File Handler (conditional) ---
    if log_file is not None:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as e:
            raise LogSetupError(f"cannot open log file '{log_file}': {e}") from e
        file_handler.setLevel(level)
        file_handler.setFormatter(MainFormatter())
        root_logger.addHandler(file_handler)
        root_logger.debug(f"Appending diagnostics to {log_file}.")
