"""Opt-in loguru output for forestkit.

forestkit logs through loguru but is disabled on import (see
``forestkit/__init__.py``). Training emits one ``PROGRESS`` record per tree
and per cross-validation fold; the tree builder emits ``DEBUG`` records for
leaf fallbacks and forced partitions. ``enable_logging`` attaches a handler
that only sees forestkit records.
"""

from __future__ import annotations

import contextlib
import sys
from collections.abc import Iterator
from typing import Any, Final, Literal

from loguru import logger

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

# Between INFO (20) and WARNING (30)
PROGRESS_LEVEL: Final[str] = "PROGRESS"
PROGRESS_LEVEL_NUMBER: Final[int] = 25

type LogLevel = Literal["TRACE", "DEBUG", "INFO", "PROGRESS", "WARNING", "ERROR", "CRITICAL"]

_FORMAT: Final[str] = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
    "{location}<level>{message}</level> {extra}"
)

try:
    logger.level(PROGRESS_LEVEL)
except ValueError:
    logger.level(PROGRESS_LEVEL, no=PROGRESS_LEVEL_NUMBER, color="<cyan>")


def enable_logging(
    level: LogLevel = PROGRESS_LEVEL,
    *,
    sink: Any = sys.stderr,
    show_location: bool = False,
) -> int:
    """Route forestkit records at or above `level` to `sink`.

    Args:
        level (LogLevel): Minimum level. The default shows one line per
            trained tree and per fold; "DEBUG" adds tree-builder detail.
        sink (Any): Any loguru sink (stream, path, or callable). Defaults to
            stderr.
        show_location (bool): Prefix messages with `module:function:line`.

    Returns:
        int: The loguru handler id, for `disable_logging`.
    """
    location = "<cyan>{name}:{function}:{line}</cyan> - " if show_location else ""
    logger.enable(PACKAGE_NAME)
    return logger.add(
        sink,
        level=level,
        filter=PACKAGE_NAME,
        format=_FORMAT.replace("{location}", location),
    )


def disable_logging(handler_id: int | None = None) -> None:
    """Silence forestkit again, removing `handler_id` if given.

    Args:
        handler_id (int | None): Handler returned by `enable_logging`.
    """
    if handler_id is not None:
        with contextlib.suppress(ValueError):
            logger.remove(handler_id)
    logger.disable(PACKAGE_NAME)


@contextlib.contextmanager
def logging_enabled(
    level: LogLevel = PROGRESS_LEVEL,
    *,
    sink: Any = sys.stderr,
    show_location: bool = False,
) -> Iterator[int]:
    """Enable forestkit logging for the duration of a `with` block.

    Examples:
        >>> with logging_enabled("DEBUG"):  # doctest: +SKIP
        ...     forest.train(rows)

    Yields:
        int: The loguru handler id.
    """
    handler_id = enable_logging(level, sink=sink, show_location=show_location)
    try:
        yield handler_id
    finally:
        disable_logging(handler_id)
