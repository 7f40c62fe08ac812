"""
Centralized logging configuration for the pprank package.

All estimators log through child loggers of ``pprank`` so that a single call
to :func:`setup_logging` controls their output. Nothing here attaches
handlers on import.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from pprank.core.exceptions import InvalidArgument

if TYPE_CHECKING:
    import numpy as np


# Record layouts selectable through ``setup_logging(format_style=...)``
LOG_FORMATS: dict[str, str] = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "estimator": "%(asctime)s %(levelname)-7s [%(name)s] %(funcName)s: %(message)s",
}

# Set on handlers installed by setup_logging
_OWNED_MARKER = "_pprank_handler"


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    format_style: str = "detailed",
    stream: TextIO | None = None,
) -> logging.Logger:
    """Route estimator logs to a stream and, optionally, a file.

    Calling it again replaces the handlers a previous call installed; handlers
    the application attached to the ``pprank`` logger itself are left alone.
    The package logger stops propagating so records are not emitted twice.

    Args:
        level: Level name ("DEBUG", "info", ...) or number. Defaults to logging.INFO.
        log_file: Optional file that also receives every record. Defaults to None.
        format_style: Key of :data:`LOG_FORMATS`. Defaults to "detailed".
        stream: Console stream. Defaults to sys.stdout.

    Returns:
        The configured ``pprank`` logger.

    Raises:
        InvalidArgument: On an unknown level name or format style.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise InvalidArgument("level", level, "a logging level name")
        level = resolved
    if format_style not in LOG_FORMATS:
        raise InvalidArgument(
            "format_style", format_style, f"one of {sorted(LOG_FORMATS)}"
        )

    logger = logging.getLogger("pprank")
    logger.setLevel(level)

    owned = [h for h in logger.handlers if getattr(h, _OWNED_MARKER, False)]
    for handler in owned:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMATS[format_style])
    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stdout if stream is None else stream)
    ]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        setattr(handler, _OWNED_MARKER, True)
        logger.addHandler(handler)

    logger.propagate = False
    logger.debug(
        f"Logging configured: level={logging.getLevelName(level)}, file={log_file}"
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module/component.

    Args:
        name: Name of the component (usually __name__).

    Returns:
        Logger instance nested under the ``pprank`` logger.
    """
    if name == "pprank" or name.startswith("pprank."):
        return logging.getLogger(name)
    return logging.getLogger(f"pprank.{name}")


@contextmanager
def log_timing(
    logger: logging.Logger, operation: str, level: int = logging.DEBUG
):
    """Context manager to log the timing of operations.

    Args:
        logger: Logger to use for timing messages.
        operation: Description of the operation being timed.
        level: Logging level for timing messages. Defaults to logging.DEBUG.

    Examples:
        >>> logger = get_logger(__name__)
        >>> with log_timing(logger, "simulating random walks"):
        ...     counts = simulator.run(starts)
    """
    start_time = time.time()
    logger.log(level, f"Starting {operation}")

    try:
        yield
        elapsed_time = time.time() - start_time
        logger.log(level, f"Completed {operation} in {elapsed_time:.2f}s")
    except Exception as exception:
        elapsed_time = time.time() - start_time
        logger.error(
            f"Failed {operation} after {elapsed_time:.2f}s: {exception}"
        )
        raise


def log_vector_stats(
    logger: logging.Logger,
    vector: np.ndarray | None,
    name: str,
    level: int = logging.DEBUG,
) -> None:
    """Log the size, mass and support of a score vector.

    Args:
        logger: Logger instance.
        vector: Vector to summarise.
        name: Name/description of the vector.
        level: Logging level. Defaults to logging.DEBUG.
    """
    if not logger.isEnabledFor(level):
        return

    if vector is None:
        logger.log(level, f"{name}: None")
        return

    support = int((vector != 0).sum())
    mass = float(vector.sum()) if vector.size else 0.0
    peak = float(vector.max()) if vector.size else 0.0
    logger.log(
        level,
        f"{name}: {vector.size:,} entries, {support:,} nonzero, mass={mass:.6g}, max={peak:.3e}",
    )


def log_algorithm_convergence(
    logger: logging.Logger,
    iteration: int,
    delta: float,
    threshold: float,
    algorithm: str = "algorithm",
) -> None:
    """Log algorithm convergence information.

    Args:
        logger: Logger instance.
        iteration: Current iteration number.
        delta: Current convergence delta.
        threshold: Convergence threshold.
        algorithm: Name of the algorithm. Defaults to "algorithm".
    """
    if delta <= threshold:
        logger.debug(
            f"{algorithm} converged at iteration {iteration} with delta {delta:.2e}"
        )
    else:
        logger.warning(
            f"{algorithm} stopped at iteration {iteration}: delta={delta:.2e} (threshold={threshold:.2e})"
        )
