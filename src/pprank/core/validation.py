"""Eager parameter validation shared by the estimator entry points."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from pprank.core.exceptions import EmptyGraph, InvalidArgument

if TYPE_CHECKING:
    from numpy.typing import ArrayLike

    from pprank.core.protocols import GraphView


def check_open_unit(name: str, value: float) -> float:
    """Require ``value`` to lie strictly inside (0, 1)."""
    if not isinstance(value, (int, float, np.floating)) or not 0.0 < value < 1.0:
        raise InvalidArgument(name, value, "a number in (0, 1)")
    return float(value)


def check_half_open_unit(name: str, value: float) -> float:
    """Require ``value`` to lie in (0, 1]."""
    if not isinstance(value, (int, float, np.floating)) or not 0.0 < value <= 1.0:
        raise InvalidArgument(name, value, "a number in (0, 1]")
    return float(value)


def check_positive(name: str, value: float) -> float:
    """Require a finite, strictly positive number."""
    if (
        not isinstance(value, (int, float, np.floating))
        or not math.isfinite(value)
        or value <= 0
    ):
        raise InvalidArgument(name, value, "a finite number > 0")
    return float(value)


def check_positive_int(name: str, value: int) -> int:
    """Require an integer >= 1."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
        raise InvalidArgument(name, value, "an integer >= 1")
    return int(value)


def check_optional_count(name: str, value: int | None) -> int | None:
    """Require ``None`` or an integer >= 0."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 0:
        raise InvalidArgument(name, value, "None or an integer >= 0")
    return int(value)


def check_source(source: ArrayLike, size: int) -> np.ndarray:
    """Convert ``source`` to a float64 copy and check its length and entries.

    Args:
        source: Nonnegative mass per node. Need not sum to 1.
        size: Number of nodes in the graph.

    Returns:
        A fresh float64 array the caller may mutate.
    """
    try:
        vector = np.array(source, dtype=np.float64).ravel()
    except (TypeError, ValueError) as exception:
        raise InvalidArgument(
            "source", source, "a sequence of numbers"
        ) from exception

    if vector.size != size:
        raise InvalidArgument(
            "len(source)", vector.size, f"the graph size {size}"
        )
    if not np.all(np.isfinite(vector)):
        raise InvalidArgument("source", source, "finite entries")
    if np.any(vector < 0):
        raise InvalidArgument("source", source, "nonnegative entries")
    return vector


def require_nonempty(graph: GraphView, operation: str = "") -> int:
    """Return ``graph.size()``, raising :class:`EmptyGraph` when it is 0."""
    size = graph.size()
    if size == 0:
        raise EmptyGraph(operation)
    return size
