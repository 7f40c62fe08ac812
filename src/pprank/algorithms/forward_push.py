"""Forward push: deterministic local propagation of personalized PageRank.

Every node holds undischarged ``residue`` and settled ``reserve`` mass. A push
on ``u`` settles ``alpha`` of its residue into its reserve and spreads the
remaining ``1 - alpha`` over its out-edges in proportion to their weights;
a dangling node settles its whole residue. Nodes are pushed in order of
``residue[u] / out_weight[u]`` (largest first) until no node exceeds the
threshold. Every push preserves ``sum(reserve) + sum(residue)``.
"""

from __future__ import annotations

import heapq
import time
from typing import TYPE_CHECKING, Iterator

import numpy as np
import scipy.sparse as sp

from pprank.core.config import ForwardPushConfig
from pprank.core.constants import DEFAULT_ALPHA, DEFAULT_PUSH_THRESHOLD
from pprank.core.graph import adjacency_csr
from pprank.core.logging import (
    get_logger,
    log_algorithm_convergence,
    log_timing,
    log_vector_stats,
)
from pprank.core.results import ForwardPushResult
from pprank.core.validation import (
    check_open_unit,
    check_optional_count,
    check_positive,
    check_source,
)

if TYPE_CHECKING:
    from numpy.typing import ArrayLike

    from pprank.core.protocols import GraphView


class ForwardPushEngine:
    """Step-by-step forward push over one graph and source vector.

    The ``reserve`` and ``residue`` arrays are live and may be inspected
    between pushes, e.g. while iterating :meth:`iter_pushes`.
    """

    def __init__(
        self,
        graph: GraphView,
        source: ArrayLike,
        alpha: float = DEFAULT_ALPHA,
        thr: float = DEFAULT_PUSH_THRESHOLD,
        *,
        max_pushes: int | None = None,
        adjacency: sp.csr_matrix | None = None,
    ) -> None:
        self.alpha = check_open_unit("alpha", alpha)
        self.threshold = check_positive("thr", thr)
        self.max_pushes = check_optional_count("max_pushes", max_pushes)
        self.graph = graph

        size = graph.size()
        self.residue = check_source(source, size)
        self.reserve = np.zeros(size, dtype=np.float64)
        self.source_mass = float(self.residue.sum())
        self.pushes = 0

        self.logger = get_logger(self.__class__.__name__)

        adjacency_matrix = adjacency_csr(graph) if adjacency is None else adjacency
        self._indptr = adjacency_matrix.indptr
        self._targets = adjacency_matrix.indices
        self.out_weight = np.asarray(adjacency_matrix.sum(axis=1)).ravel()
        self.dangling = self.out_weight == 0
        self._shares = adjacency_matrix.data / np.repeat(
            np.where(self.dangling, 1.0, self.out_weight),
            np.diff(self._indptr),
        )
        self._key_scale = np.where(self.dangling, 1.0, self.out_weight)

        # Max-heap of (-key, node); entries go stale when a node's residue
        # changes and are skipped when popped.
        self._heap: list[tuple[float, int]] = []
        self._schedule(np.flatnonzero(self.residue))

    @classmethod
    def from_config(
        cls, graph: GraphView, source: ArrayLike, cfg: ForwardPushConfig
    ) -> ForwardPushEngine:
        return cls(
            graph,
            source,
            alpha=cfg.alpha,
            thr=cfg.threshold,
            max_pushes=cfg.max_pushes,
        )

    def normalized_residue(self) -> np.ndarray:
        """Residue per unit of outgoing weight (raw residue when dangling)."""
        return self.residue / self._key_scale

    def _key(self, node_id: int) -> float:
        return self.residue[node_id] / self._key_scale[node_id]

    def _schedule(self, nodes: np.ndarray) -> None:
        if not len(nodes):
            return
        keys = self.residue[nodes] / self._key_scale[nodes]
        above = keys > self.threshold
        for node_id, key in zip(nodes[above], keys[above]):
            heapq.heappush(self._heap, (-float(key), int(node_id)))

    def push(self, node_id: int) -> None:
        """Push ``node_id`` once, whatever its current residue."""
        mass = self.residue[node_id]
        self.residue[node_id] = 0.0
        self.pushes += 1

        if self.dangling[node_id]:
            self.reserve[node_id] += mass
            return

        self.reserve[node_id] += self.alpha * mass
        start, end = self._indptr[node_id], self._indptr[node_id + 1]
        targets = self._targets[start:end]
        self.residue[targets] += (1.0 - self.alpha) * mass * self._shares[start:end]
        self._schedule(targets)

    def _next_node(self) -> int | None:
        while self._heap:
            negative_key, node_id = heapq.heappop(self._heap)
            if -negative_key == self._key(node_id) and -negative_key > self.threshold:
                return node_id
        return None

    def iter_pushes(self) -> Iterator[int]:
        """Push until converged (or ``max_pushes``), yielding each pushed node."""
        while self.max_pushes is None or self.pushes < self.max_pushes:
            node_id = self._next_node()
            if node_id is None:
                return
            self.push(node_id)
            yield node_id

    @property
    def converged(self) -> bool:
        return not bool(np.any(self.normalized_residue() > self.threshold))

    def run(self) -> ForwardPushResult:
        """Push to convergence and return reserve and residue."""
        start_time = time.time()
        self.logger.debug(
            f"Forward push: alpha={self.alpha}, thr={self.threshold:.3e}, nodes={len(self.reserve):,}, source mass={self.source_mass:.6g}"
        )

        with log_timing(self.logger, "forward push"):
            for _ in self.iter_pushes():
                pass

        converged = self.converged
        peak = float(self.normalized_residue().max()) if len(self.residue) else 0.0
        log_algorithm_convergence(
            self.logger, self.pushes, peak, self.threshold, "forward push"
        )
        if not converged:
            self.logger.warning(
                f"Forward push hit max_pushes={self.max_pushes:,} before reaching thr={self.threshold:.3e}"
            )
        log_vector_stats(self.logger, self.reserve, "reserve")
        log_vector_stats(self.logger, self.residue, "residue")

        return ForwardPushResult(
            scores=self.reserve,
            computation_time=time.time() - start_time,
            residue=self.residue,
            pushes=self.pushes,
            threshold=self.threshold,
            converged=converged,
        )


def forward_push(
    graph: GraphView,
    source: ArrayLike,
    alpha: float = DEFAULT_ALPHA,
    thr: float = DEFAULT_PUSH_THRESHOLD,
    *,
    max_pushes: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Run forward push and return ``(reserve, residue)``.

    Args:
        graph: Graph to propagate over.
        source: Nonnegative mass per node, length n. Need not sum to 1.
        alpha: Fraction of pushed residue settled into reserve, in (0, 1).
        thr: Residue per unit of outgoing weight left unpushed, > 0.
        max_pushes: Optional cap on the number of pushes.

    Returns:
        ``(reserve, residue)``; their combined mass equals ``sum(source)``.

    Raises:
        InvalidArgument: On out-of-range parameters or a source of the wrong length.
    """
    result = ForwardPushEngine(
        graph, source, alpha, thr, max_pushes=max_pushes
    ).run()
    return result.reserve, result.residue
