#!/usr/bin/env python3

"""
Debug trace logging for gh-codeql.

User-facing messages are printed directly; this logger only carries the
trace output enabled with ``gh codeql debug on``.
"""

import logging
import sys

from colorama import Fore, Style

LOGGER_NAME = "ghcodeql"


class ColoredFormatter(logging.Formatter):
    """Formatter that prefixes each record with a coloured level tag"""

    COLORS = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.RED + Style.BRIGHT,
    }

    def __init__(self, fmt: str, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            record.levelname_colored = f"{color}[{record.levelname}]{Style.RESET_ALL}"
        else:
            record.levelname_colored = f"[{record.levelname}]"
        return super().format(record)


def setup_logging(verbose: bool = False, propagate: bool = False) -> logging.Logger:
    """
    Configure the gh-codeql logger.

    Args:
        verbose: Emit DEBUG trace output (the persisted ``debug`` flag)
        propagate: Allow propagation to the root logger (useful for testing)

    Returns:
        Configured logger instance
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        ColoredFormatter(
            "%(levelname_colored)s %(name)s: %(message)s",
            use_colors=sys.stderr.isatty(),
        )
    )
    logger.addHandler(handler)
    logger.propagate = propagate
    return logger

