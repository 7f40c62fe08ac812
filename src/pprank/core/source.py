"""Source (personalization) vector strategies."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Protocol, runtime_checkable

import numpy as np

from pprank.core.exceptions import InvalidArgument, NodeNotFound
from pprank.core.graph import out_weight_sums

if TYPE_CHECKING:
    from pprank.core.protocols import GraphView


@runtime_checkable
class SourceStrategy(Protocol):
    """Protocol for building a source vector for a graph."""

    def __call__(self, graph: GraphView) -> np.ndarray:
        """Compute per-node source mass.

        Args:
            graph: Graph the vector is built for.

        Returns:
            Nonnegative vector of length ``graph.size()``.
        """
        ...


class UniformSource:
    """Equal mass on every node, summing to ``total``."""

    def __init__(self, total: float = 1.0) -> None:
        self.total = total

    def __call__(self, graph: GraphView) -> np.ndarray:
        node_count = graph.size()
        return np.full(node_count, self.total / max(node_count, 1))


class SingleNodeSource:
    """All mass on one node (single-source PPR)."""

    def __init__(self, node_id: int, total: float = 1.0) -> None:
        self.node_id = node_id
        self.total = total

    def __call__(self, graph: GraphView) -> np.ndarray:
        node_count = graph.size()
        if not 0 <= self.node_id < node_count:
            raise NodeNotFound(self.node_id, node_count)
        vector = np.zeros(node_count)
        vector[self.node_id] = self.total
        return vector


class CustomSource:
    """Mass taken from a ``{node_id: mass}`` mapping; other nodes get 0."""

    def __init__(self, masses: Mapping[int, float], normalize: bool = False) -> None:
        """Initialize a custom source.

        Args:
            masses: Mass per node id.
            normalize: Rescale so the vector sums to 1. Defaults to False.
        """
        self.masses = dict(masses)
        self.normalize = normalize

    def __call__(self, graph: GraphView) -> np.ndarray:
        node_count = graph.size()
        vector = np.zeros(node_count)
        for node_id, mass in self.masses.items():
            if not 0 <= node_id < node_count:
                raise NodeNotFound(node_id, node_count)
            if mass < 0:
                raise InvalidArgument(f"mass[{node_id}]", mass, "a number >= 0")
            vector[node_id] = mass

        if self.normalize:
            vector /= vector.sum() or 1.0
        return vector


class OutWeightSource:
    """Mass proportional to each node's total outgoing weight.

    Nodes without outgoing edges get no mass. Falls back to uniform when the
    graph has no edges at all.
    """

    def __call__(self, graph: GraphView) -> np.ndarray:
        weights = out_weight_sums(graph)
        total = weights.sum()
        if total == 0:
            return UniformSource()(graph)
        return weights / total


def uniform(graph: GraphView) -> np.ndarray:
    """Uniform unit-mass source vector."""
    return UniformSource()(graph)


def single_node(graph: GraphView, node_id: int) -> np.ndarray:
    """Unit mass on ``node_id``."""
    return SingleNodeSource(node_id)(graph)
