"""Logging configuration for gitsync

Two sinks: a per-run log file (always used under the TUI, which owns the
terminal) and stderr for headless runs.
"""
import logging
import sys
from pathlib import Path

PACKAGE = 'gitsync'
FILE_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'
CONSOLE_FORMAT = '%(levelname)s %(name)s: %(message)s'

LEVEL_COLORS = {
    logging.DEBUG: '\033[36m',
    logging.INFO: '\033[32m',
    logging.WARNING: '\033[33m',
    logging.ERROR: '\033[31m',
}


class LevelColorFormatter(logging.Formatter):
    """Colours the level name when stderr is a terminal."""

    def formatMessage(self, record):
        line = super().formatMessage(record)
        color = LEVEL_COLORS.get(record.levelno)
        if color and sys.stderr.isatty():
            line = line.replace(record.levelname, f"{color}{record.levelname}\033[0m", 1)
        return line


def get_log_file() -> Path:
    return Path.home() / f'.{PACKAGE}' / f'{PACKAGE}.log'


def setup_logging(verbose: bool = False, debug: bool = False, tui_mode: bool = False) -> None:
    """
    Configure the package logger.

    Args:
        verbose: Show INFO messages on stderr
        debug: Show DEBUG messages on stderr and also write the log file
        tui_mode: Write everything to the log file and nothing to stderr
    """
    console_level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if (tui_mode or debug) else console_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if tui_mode or debug:
        log_file = get_log_file()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='w')
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%H:%M:%S'))
        root_logger.addHandler(file_handler)

    if not tui_mode:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(LevelColorFormatter(CONSOLE_FORMAT))
        root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Logger named after the module, without the package prefix."""
    prefix = f'{PACKAGE}.'
    return logging.getLogger(name[len(prefix):] if name.startswith(prefix) else name)
