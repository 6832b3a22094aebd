"""
piletkit Logging
================

Thin wrapper around the standard library ``logging`` module.

- ``get_logger(__name__)`` returns a ``PiletLogger`` bound to the
  ``piletkit`` logger hierarchy
- ``configure_logging()`` installs a rich console handler once per process
- keyword arguments passed to log calls are rendered as ``key=value`` context

Usage:
    from piletkit_common.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Updating NPM package", ref="piral-base@1.2.0")
"""

import logging
from typing import Any, Dict, Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from .config import get_settings

ROOT_LOGGER_NAME = "piletkit"

_configured = False


def _format_context(context: Dict[str, Any]) -> str:
    if not context:
        return ""
    return " " + " ".join(f"{key}={value}" for key, value in context.items())


class PiletLogger:
    """
    Logger with optional key/value context.

    Args:
        name: Logger name; nested under ``piletkit`` unless it already is
    """

    def __init__(self, name: str):
        if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        self.name = name
        self._logger = logging.getLogger(name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _log(self, level: int, message: str, exc_info: bool = False, **context: Any) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message + _format_context(context), exc_info=exc_info)

    def debug(self, message: str, **context: Any) -> None:
        self._log(logging.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(logging.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(logging.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> None:
        self._log(logging.ERROR, message, **context)

    def exception(self, message: str, **context: Any) -> None:
        self._log(logging.ERROR, message, exc_info=True, **context)


def get_logger(name: str) -> PiletLogger:
    """Get a piletkit logger for the given module name."""
    return PiletLogger(name)


def configure_logging(
    level: Union[str, int, None] = None,
    use_rich: bool = True,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure the ``piletkit`` logger hierarchy.

    Calling it again only updates the level.

    Args:
        level: Log level name or number (defaults to the configured setting)
        use_rich: Render records through ``rich.logging.RichHandler``
        console: Optional rich console to write to (stderr by default)

    Returns:
        The configured root ``piletkit`` logger
    """
    global _configured

    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    if not _configured:
        if use_rich:
            handler: logging.Handler = RichHandler(
                console=console or Console(stderr=True),
                show_path=False,
                markup=False,
                rich_tracebacks=True,
            )
            handler.setFormatter(logging.Formatter("%(message)s"))
        else:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
        root.addHandler(handler)
        _configured = True

    return root


__all__ = [
    "PiletLogger",
    "get_logger",
    "configure_logging",
    "ROOT_LOGGER_NAME",
]
