"""Logging configuration and error reporting helpers."""

from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path
from typing import Any, Optional, TypeVar, Union

from cube_reporter.errors import CubeReporterError

DEFAULT_LOGGER_NAME = "cube_reporter"
DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_T = TypeVar("_T")


def configure_logging(
    level: int = DEFAULT_LOG_LEVEL,
    *,
    logger_name: str = DEFAULT_LOGGER_NAME,
    fmt: str = DEFAULT_LOG_FORMAT,
    force: bool = False,
) -> logging.Logger:
    logging.basicConfig(level=level, format=fmt, force=force)
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    return logger


def attach_file_handler(
    path: Union[str, Path],
    *,
    level: int = DEFAULT_LOG_LEVEL,
    logger_name: str = DEFAULT_LOGGER_NAME,
    fmt: str = DEFAULT_LOG_FORMAT,
) -> logging.Handler:
    """Mirror the package logger into a file next to the generated report.

    The caller owns the returned handler and must pass it to
    :func:`detach_handler` once the session is over.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    logger = logging.getLogger(logger_name)
    logger.addHandler(handler)
    if logger.level == logging.NOTSET or logger.level > level:
        logger.setLevel(level)
    return handler


def detach_handler(
    handler: Optional[logging.Handler],
    *,
    logger_name: str = DEFAULT_LOGGER_NAME,
) -> None:
    if handler is None:
        return
    logging.getLogger(logger_name).removeHandler(handler)
    handler.close()


def get_user_message(exc: BaseException) -> str:
    if isinstance(exc, CubeReporterError):
        return exc.user_message
    return f"Unexpected error: {exc}"


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    *,
    show_traceback: bool = False,
) -> str:
    user_message = get_user_message(exc)
    logger.error(user_message)
    if isinstance(exc, CubeReporterError) and exc.context:
        logger.debug("Error context: %s", exc.log_message())
    if show_traceback:
        logger.error("Detailed traceback:", exc_info=exc)
    else:
        logger.debug("Detailed traceback:", exc_info=exc)
    return user_message


def run_with_error_handling(
    func: Callable[..., _T],
    *args: Any,
    logger: logging.Logger,
    show_traceback: bool = False,
    **kwargs: Any,
) -> _T:
    try:
        return func(*args, **kwargs)
    except Exception as exc:
        log_exception(logger, exc, show_traceback=show_traceback)
        raise


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_LOG_FORMAT",
    "attach_file_handler",
    "configure_logging",
    "detach_handler",
    "get_user_message",
    "log_exception",
    "run_with_error_handling",
]
