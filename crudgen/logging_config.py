"""Logging setup shared by every crudgen module.

Modules obtain their logger through :func:`get_logger`; the CLI calls
:func:`configure_logging` once to attach a Rich handler to the package
root logger.
"""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "crudgen"
DEFAULT_FORMAT = "%(message)s"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger that lives under the ``crudgen`` hierarchy."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = logging.WARNING,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure the package root logger.

    Calling this more than once only updates the level.

    Args:
        level: Logging level name or number
        console: Rich console to log to (defaults to stderr)

    Returns:
        The configured root logger
    """
    global _configured

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    if not _configured:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root.addHandler(handler)
        _configured = True

    return root
