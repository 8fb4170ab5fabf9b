"""Logging setup for api_typegen.

Every module obtains its logger through :func:`get_logger` so that a single
call to :func:`setup_logging` controls the whole package.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "api_typegen"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the package logger."""
    if not name.startswith(PACKAGE_LOGGER):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: int | str = logging.WARNING,
    console: Console | None = None,
    show_path: bool = False,
) -> logging.Logger:
    """Install a rich handler on the package logger.

    Args:
        level: Log level for the package logger.
        console: Optional rich console (defaults to stderr).
        show_path: Whether rich should print the emitting source location.

    Returns:
        The configured package logger.
    """
    global _configured

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if not _configured:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=show_path,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        logger.propagate = False
        _configured = True

    return logger
