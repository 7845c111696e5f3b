"""Logging setup shared by the whole package.

Every module grabs its logger through :func:`get_logger`; the CLI calls
:func:`configure_logging` once to attach a rich console handler.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "xsdgen"


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the package logger.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        Logger instance.
    """
    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(debug: bool = False, console: Console | None = None) -> logging.Logger:
    """Configure the package logger.

    Args:
        debug: Log at DEBUG level instead of WARNING.
        console: Rich console to log to (defaults to stderr).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.propagate = False
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    # Clear existing handlers to reconfigure logger
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=debug,
        rich_tracebacks=debug,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)

    return logger
