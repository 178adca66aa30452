"""
Logging configuration for routekeeper.

Console output is quiet by default (WARNING+) so that the page table is the
main output; -v shows the full RPC conversation including requests/urllib3
connection messages.

Security:
    Interface names and result strings come from the router. Pass them
    through sanitize_for_log() from utils.system before logging.
"""

import copy
import logging
import sys
from pathlib import Path
from typing import Optional


class VerboseFilter(logging.Filter):
    """
    Filter that shows DEBUG/INFO messages only when verbose mode is enabled.

    Messages at WARNING level and above always pass through.
    """

    def __init__(self, verbose: bool = False):
        super().__init__()
        self.verbose = verbose

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Determine if record should be logged.

        Args:
            record: Log record to filter

        Returns:
            True if record should be logged
        """
        if record.levelno >= logging.WARNING:
            return True

        return self.verbose


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colours the level name with ANSI escape codes.

    Color scheme:
        DEBUG: Cyan
        INFO: Green
        WARNING: Yellow
        ERROR: Red
        CRITICAL: Magenta
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Other handlers share the record, so colour a copy
        record = copy.copy(record)
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    use_colors: bool = True
) -> None:
    """
    Configure application-wide logging.

    Logs go to stderr so the rendered page on stdout stays clean.
    File output (if requested) always receives DEBUG+ in plain text.

    Default mode (verbose=False):
        - WARNING and above only
        - urllib3/requests loggers capped at WARNING

    Verbose mode (verbose=True):
        - DEBUG and above for every logger

    Args:
        verbose: If True, enable DEBUG level logging
        log_file: Optional file path to write logs to
        use_colors: If True, use colored output for console

    Examples:
        >>> setup_logging(verbose=True, log_file=Path("routekeeper.log"))
    """
    level = logging.DEBUG if verbose else logging.WARNING

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.addFilter(VerboseFilter(verbose))

    console_formatter: logging.Formatter
    if use_colors:
        console_formatter = ColoredFormatter('%(levelname)s: %(message)s')
    else:
        console_formatter = logging.Formatter('%(levelname)s: %(message)s')

    console_handler.setFormatter(console_formatter)

    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)

        # Never write ANSI escape sequences to files
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG,
        handlers=handlers,
        force=True
    )

    # Connection pool chatter, e.g.
    #   DEBUG: Starting new HTTP connection (1): 192.168.1.1:80
    # Verbose mode resets them to NOTSET so they inherit DEBUG from root
    noisy_level = logging.NOTSET if verbose else logging.WARNING
    for name in ('urllib3', 'requests', 'asyncio'):
        logging.getLogger(name).setLevel(noisy_level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Call at module level with __name__ and log with %-style arguments:

        logger = get_logger(__name__)
        logger.debug("Testing %s", sanitize_for_log(iface))

    Args:
        name: Module name, typically __name__

    Returns:
        Logger instance for the module
    """
    return logging.getLogger(name)
