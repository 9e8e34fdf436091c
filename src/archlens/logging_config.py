"""
Logging configuration for ArchLens.

Library modules only call ``get_logger``. An embedding application calls
``setup_logging`` once to route the ``archlens`` logger tree to a rich
console handler and, optionally, a log file.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "archlens"

FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Marks handlers installed here so a repeated setup replaces only those
_OWNED_ATTR = "_archlens_owned"


def _level_for(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def _remove_owned_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _OWNED_ATTR, False):
            logger.removeHandler(handler)
            handler.close()


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Attach a rich console handler (and an optional file handler) to the
    ``archlens`` logger.

    Calling it again replaces the handlers from the previous call, so the
    verbosity can be changed at runtime without duplicate output.

    Args:
        verbose: Enable DEBUG level logging with source paths
        quiet: Only ERROR and above; wins over ``verbose``
        log_file: Optional file path that receives a timestamped copy of every record

    Returns:
        The configured ``archlens`` logger
    """
    level = _level_for(verbose, quiet)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    _remove_owned_handlers(logger)

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _OWNED_ATTR, True)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., 'archlens.graph.builder').
              If None, returns the root archlens logger.

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
