from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from loguru import logger

# Shared line format for console and file sinks
_DEFAULT_LOGGER_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> [<magenta>{extra[component]}</magenta>] | "
    "- <level>{message}</level>"
)


def setup_logging(level: str = "INFO") -> None:
    """Minimal colorized stderr logging for scripts and notebooks."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        colorize=True,
        format="<green>{time:HH:mm:ss}</green> | "
        "<level>{level: >8}</level> | "
        "<cyan>{name}</cyan> | <level>{message}</level>",
    )


def configure_logging(
    log_dir: Path | None,
    component: str,
    *,
    console_level: str = "INFO",
    file_level: str = "INFO",
    rotation: str | int | None = "20 MB",
    retention: str | int | None = "30 days",
    enqueue: bool = False,
) -> Path | None:
    """Configure a console sink and, when ``log_dir`` is given, a rotating file sink.

    The file sink writes to ``<log_dir>/<component>.log``, which is returned.
    """

    logger.remove()
    logger.configure(extra={"component": component})

    logger.add(
        sys.stderr,
        level=console_level,
        format=_DEFAULT_LOGGER_FORMAT,
        colorize=True,
        enqueue=enqueue,
        backtrace=False,
        diagnose=False,
    )

    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{component}.log"

    logger.add(
        log_file,
        level=file_level,
        format=_DEFAULT_LOGGER_FORMAT,
        rotation=rotation,
        retention=retention,
        enqueue=enqueue,
        backtrace=False,
        diagnose=False,
    )
    return log_file


class InterceptHandler(logging.Handler):
    """Route stdlib ``logging`` records (e.g. from tifffile) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - simple bridge
        try:
            level: Any = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = sys._getframe(6), 6
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def intercept_stdlib_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
