"""Logging for the search engine.

All modules log below the ``tender_search`` logger, obtained with
``get_logger("sourcing.ted")`` and the like. ``setup_logging`` is called
once by entry points (scripts, the embedding application); library code
only ever calls ``get_logger``.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "tender_search"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    quiet_libraries: bool = True,
) -> logging.Logger:
    """Configure the ``tender_search`` logger tree.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path for file logging
        format_string: Optional custom format string
        quiet_libraries: Raise HTTP client and SQL loggers to WARNING
            unless ``level`` is DEBUG

    Returns:
        The package root logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(numeric_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if quiet_libraries:
        library_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(library_level)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the package root.

    Args:
        name: Dotted module name (e.g., "aggregator", "sourcing.ted")

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
