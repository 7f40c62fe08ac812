"""Per-node prefix-sum tables for sampling one random-walk step.

For node ``u`` with outgoing weights ``w_1..w_k`` (ordered by target id) the
table stores the increasing bounds ``alpha + (1 - alpha) * cumsum(w) / sum(w)``.
A uniform draw ``r < alpha`` means the walk stops; otherwise it moves to the
first target whose bound is ``>= r``. Nodes with no outgoing weight are
dangling and teleport uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import scipy.sparse as sp

from pprank.core.graph import adjacency_csr
from pprank.core.logging import get_logger

if TYPE_CHECKING:
    from pprank.core.protocols import GraphView

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransitionTable:
    """CSR-shaped prefix-sum table built once per call."""

    alpha: float
    indptr: np.ndarray
    targets: np.ndarray
    bounds: np.ndarray
    out_weight: np.ndarray

    @property
    def size(self) -> int:
        return len(self.indptr) - 1

    @property
    def out_degree(self) -> np.ndarray:
        return np.diff(self.indptr)

    @property
    def dangling(self) -> np.ndarray:
        return self.out_degree == 0

    @property
    def total_weight(self) -> float:
        return float(self.out_weight.sum())

    @classmethod
    def from_graph(cls, graph: GraphView, alpha: float) -> TransitionTable:
        """Build the table from any :class:`GraphView`."""
        return cls.from_csr(adjacency_csr(graph), alpha)

    @classmethod
    def from_csr(
        cls, adjacency_matrix: sp.csr_matrix, alpha: float
    ) -> TransitionTable:
        """Build the table from an out-adjacency produced by :func:`adjacency_csr`."""
        indptr = adjacency_matrix.indptr.astype(np.int64)
        weights = adjacency_matrix.data
        bounds = np.empty_like(weights)

        for node_id in range(len(indptr) - 1):
            start, end = indptr[node_id], indptr[node_id + 1]
            if start == end:
                continue
            cumulative = np.cumsum(weights[start:end])
            bounds[start:end] = alpha + (1.0 - alpha) * (
                cumulative / cumulative[-1]
            )
            # r < 1 always lands inside the row
            bounds[end - 1] = 1.0

        table = cls(
            alpha=alpha,
            indptr=indptr,
            targets=adjacency_matrix.indices.astype(np.int64),
            bounds=bounds,
            out_weight=np.asarray(adjacency_matrix.sum(axis=1)).ravel(),
        )
        logger.debug(
            f"Transition table: {table.size:,} nodes, {len(bounds):,} edges, {int(table.dangling.sum()):,} dangling"
        )
        return table

    def sample(self, node_id: int, draw: float) -> int | None:
        """Resolve a single draw at ``node_id``.

        Returns:
            The next node, or None when the walk stops (``draw < alpha``) or
            the node is dangling (the caller teleports).
        """
        if draw < self.alpha:
            return None
        start, end = self.indptr[node_id], self.indptr[node_id + 1]
        if start == end:
            return None
        offset = np.searchsorted(self.bounds[start:end], draw, side="left")
        return int(self.targets[start + offset])

    def advance(
        self,
        nodes: np.ndarray,
        draws: np.ndarray,
        rng: np.random.Generator,
    ) -> np.ndarray:
        """Move every walk one step.

        Args:
            nodes: Current node of each walk.
            draws: Uniform draws in ``[alpha, 1)``, one per walk.
            rng: Generator used for dangling-node teleports.

        Returns:
            Next node of each walk.
        """
        lo = self.indptr[nodes]
        hi = self.indptr[nodes + 1] - 1
        dangling = hi < lo

        following = ~dangling
        lo_f, hi_f, draws_f = lo[following], hi[following], draws[following]

        # Lower bound search, vectorised over walks
        searching = lo_f < hi_f
        while searching.any():
            mid = (lo_f + hi_f) // 2
            go_right = searching & (self.bounds[mid] < draws_f)
            lo_f = np.where(go_right, mid + 1, lo_f)
            hi_f = np.where(searching & ~go_right, mid, hi_f)
            searching = lo_f < hi_f

        next_nodes = np.empty_like(nodes)
        next_nodes[following] = self.targets[lo_f]
        teleports = int(dangling.sum())
        if teleports:
            next_nodes[dangling] = rng.integers(0, self.size, size=teleports)
        return next_nodes
