"""
Logging setup for Crawly.

Every module logs through a child of the ``crawly`` logger. The library
installs no handlers on import; the CLI calls setup_logging() once the
configuration is loaded.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

from crawly.config.settings import LoggingSettings


ROOT_LOGGER_NAME = "crawly"

# Handlers installed by setup_logging carry this name
_HANDLER_NAME = "crawly"


def setup_logging(
    settings: LoggingSettings | None = None,
    level: str | None = None,
) -> logging.Logger:
    """
    Install console and file handlers on the ``crawly`` logger.

    Calling it again replaces the handlers of the previous call, so the
    level can be raised after the configuration file has been read.

    Args:
        settings: Logging configuration. None uses the model defaults.
        level: Level overriding ``settings.level`` (the CLI's --verbose)

    Returns:
        The ``crawly`` logger
    """
    settings = settings or LoggingSettings()
    level_no = logging.getLevelName(level or settings.level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    _remove_handlers(logger)
    logger.setLevel(level_no)
    # stdout is reserved for crawl output
    logger.propagate = False

    handlers: list[logging.Handler] = []
    if settings.log_to_console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if settings.file_path is not None:
        settings.file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=str(settings.file_path),
            maxBytes=settings.max_file_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        ))

    formatter = logging.Formatter(fmt=settings.format, datefmt=settings.date_format)
    for handler in handlers:
        handler.set_name(_HANDLER_NAME)
        handler.setLevel(level_no)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger under the ``crawly`` hierarchy.

    Example:
        >>> get_logger("crawler.engine").name
        'crawly.crawler.engine'
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Remove the installed handlers and hand records back to the root logger."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    _remove_handlers(logger)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def _remove_handlers(logger: logging.Logger) -> None:
    for handler in [h for h in logger.handlers if h.get_name() == _HANDLER_NAME]:
        logger.removeHandler(handler)
        handler.close()
