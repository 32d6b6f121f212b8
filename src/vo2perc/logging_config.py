"""
Opt-in log output for simulation scripts.

The package logger carries only a NullHandler, so importing vo2perc prints nothing. Scripts call
`setup_logging` to follow a run; records are stamped with the time elapsed since import, which is
what matters when watching long Monte Carlo runs.
"""
import logging
import sys
from typing import Optional, Union

LOGGER_NAME = "vo2perc"
LOG_FORMAT = "%(relativeCreated)10.0f ms %(levelname)-7s %(name)s: %(message)s"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def _owned(handler):
    return getattr(handler, "_vo2perc_owned", False)


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Sends the records of the vo2perc logger to stdout and, optionally, to `log_file`.

    Calling it again replaces the handlers installed by the previous call, handlers added by
    the application are left alone.

    Args:
        level: logging level or its name, e.g. logging.DEBUG or "DEBUG"
        log_file: file that receives a copy of the records, overwritten on every call

    Returns:
        The package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in [h for h in logger.handlers if _owned(h)]:
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler._vo2perc_owned = True
        logger.addHandler(handler)

    return logger
