"""
Logging Configuration
Opt-in log output for applications embedding vsvg.

Modules only create loggers under the 'vsvg' namespace; nothing is printed
until the host application calls setup_logging() (or configures logging
itself).
"""
import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
    propagate: bool = True,
) -> logging.Logger:
    """
    Route 'vsvg' log records to the console and, optionally, a file.

    Calling it again replaces the handlers of the previous call.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO).
        log_file: Optional path; the file is overwritten.
        stream: Console stream, stdout by default.
        propagate: Also pass records on to the root logger.

    Returns:
        The 'vsvg' package logger.
    """
    logger = logging.getLogger("vsvg")
    logger.setLevel(level)
    logger.propagate = propagate

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    _attach(logger, logging.StreamHandler(stream or sys.stdout), level)
    if log_file:
        _attach(logger, logging.FileHandler(log_file, mode='w', encoding='utf-8'), level)

    logger.debug(f"Logging initialized (level={logging.getLevelName(level)}, file={log_file!r}).")
    return logger
