"""FORA: forward push followed by random walks over the leftover residue.

Forward push resolves the heavy part of the PPR mass exactly; the residue it
leaves behind is then spread by random walks, ``ceil(omega_coef * r[v])``
of them from each node ``v`` with residue ``r[v]``, each carrying
``r[v] / walks_v`` to its stopping node.

Parameters follow Wang et al., "FORA: Simple and Effective Approximate
Single-Source Personalized PageRank" (KDD 2017). With target relative error
``epsilon``, minimum PPR of interest ``delta`` and failure probability
``p_f``::

    omega_coef = (2 * epsilon / 3 + 2) * ln(2 / p_f) / (epsilon**2 * delta)
    thr        = 1 / sqrt(omega_coef * m)

where ``m`` is the graph's total outgoing weight. Every node whose PPR
exceeds ``delta`` is then estimated within relative error ``epsilon`` with
probability at least ``1 - p_f``. Both ``delta`` and ``p_f`` default to
``1 / n``.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from pprank.algorithms.forward_push import ForwardPushEngine
from pprank.core.config import ForaConfig, WalkConfig
from pprank.core.constants import (
    DEFAULT_ALPHA,
    DEFAULT_BATCH_SIZE,
    DEFAULT_EPSILON,
    FORA_EPSILON_CONSTANT,
    FORA_EPSILON_LINEAR,
)
from pprank.core.graph import adjacency_csr
from pprank.core.logging import get_logger, log_timing, log_vector_stats
from pprank.core.results import ForaResult, ForwardPushResult
from pprank.core.transition import TransitionTable
from pprank.core.validation import (
    check_half_open_unit,
    check_open_unit,
    check_optional_count,
    check_positive_int,
    check_source,
)
from pprank.core.walks import WalkPlan, simulate_walks

if TYPE_CHECKING:
    from numpy.typing import ArrayLike

    from pprank.core.protocols import GraphView


@dataclass(frozen=True)
class ForaParameters:
    """Push threshold and walk budget derived from the error target."""

    epsilon: float
    delta: float
    failure_probability: float
    total_weight: float
    omega_coef: float
    threshold: float

    @classmethod
    def derive(
        cls,
        epsilon: float,
        delta: float,
        failure_probability: float,
        total_weight: float,
    ) -> ForaParameters:
        omega_coef = (
            (FORA_EPSILON_LINEAR * epsilon + FORA_EPSILON_CONSTANT)
            * math.log(2.0 / failure_probability)
            / (epsilon**2 * delta)
        )
        # Edgeless graphs use m = 1
        threshold = 1.0 / math.sqrt(omega_coef * max(total_weight, 1.0))
        return cls(
            epsilon=epsilon,
            delta=delta,
            failure_probability=failure_probability,
            total_weight=total_weight,
            omega_coef=omega_coef,
            threshold=threshold,
        )

    def walk_counts(self, residue: np.ndarray) -> np.ndarray:
        """Walks to start from every node: ``ceil(omega_coef * residue)``."""
        return np.ceil(self.omega_coef * residue).astype(np.int64)


class ForaEstimator:
    """Approximate PPR with a relative-error guarantee."""

    def __init__(
        self,
        graph: GraphView,
        source: ArrayLike,
        alpha: float = DEFAULT_ALPHA,
        epsilon: float = DEFAULT_EPSILON,
        *,
        delta: float | None = None,
        failure_probability: float | None = None,
        max_pushes: int | None = None,
        seed: int | None = None,
        workers: int = 1,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        """
        Initialize the estimator. Parameters are validated immediately.

        Args:
            graph: Graph to estimate over.
            source: Nonnegative mass per node, length n.
            alpha: Per-step stop probability, in (0, 1).
            epsilon: Target relative error, in (0, 1).
            delta: Minimum PPR of interest, in (0, 1]. Defaults to 1/n.
            failure_probability: Allowed failure probability, in (0, 1].
                Defaults to 1/n.
            max_pushes: Optional cap on forward-push steps.
            seed: Seed of this estimator's RNG stream.
            workers: Threads to shard walks across.
            batch_size: Walks advanced together per numpy batch.
        """
        self.epsilon = check_open_unit("epsilon", epsilon)
        self.alpha = check_open_unit("alpha", alpha)
        self.graph = graph
        self.size = graph.size()
        self.source = check_source(source, self.size)

        default = 1.0 / max(self.size, 1)
        self.delta = check_half_open_unit(
            "delta", default if delta is None else delta
        )
        self.failure_probability = check_half_open_unit(
            "failure_probability",
            default if failure_probability is None else failure_probability,
        )
        self.max_pushes = check_optional_count("max_pushes", max_pushes)
        self.seed = seed
        self.workers = check_positive_int("workers", workers)
        self.batch_size = check_positive_int("batch_size", batch_size)

        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    def from_config(
        cls, graph: GraphView, source: ArrayLike, cfg: ForaConfig
    ) -> ForaEstimator:
        walks: WalkConfig = cfg.walks
        return cls(
            graph,
            source,
            alpha=cfg.alpha,
            epsilon=cfg.epsilon,
            delta=cfg.delta,
            failure_probability=cfg.failure_probability,
            max_pushes=cfg.max_pushes,
            seed=walks.seed,
            workers=walks.workers,
            batch_size=walks.batch_size,
        )

    def parameters(self, table: TransitionTable | None = None) -> ForaParameters:
        """Derive the push threshold and walk coefficient for this graph."""
        if table is None:
            table = TransitionTable.from_graph(self.graph, self.alpha)
        return ForaParameters.derive(
            self.epsilon,
            self.delta,
            self.failure_probability,
            total_weight=table.total_weight,
        )

    def run(self) -> ForaResult:
        """Push, then walk from the residue; return the combined estimate."""
        start_time = time.time()
        source_mass = float(self.source.sum())
        if self.size == 0 or source_mass == 0:
            self.logger.debug("Empty graph or zero source; returning zeros")
            zeros = np.zeros(self.size)
            return ForaResult(
                scores=zeros.copy(),
                computation_time=0.0,
                push=ForwardPushResult(
                    scores=zeros.copy(), residue=zeros.copy(), converged=True
                ),
            )

        adjacency_matrix = adjacency_csr(self.graph)
        table = TransitionTable.from_csr(adjacency_matrix, self.alpha)
        params = self.parameters(table)
        self.logger.debug(
            f"FORA: alpha={self.alpha}, epsilon={self.epsilon}, delta={self.delta:.3e}, "
            f"p_f={self.failure_probability:.3e}, omega_coef={params.omega_coef:.4g}, thr={params.threshold:.3e}"
        )

        # Unit mass keeps thr and omega_coef meaningful; rescaled at the end
        push = ForwardPushEngine(
            self.graph,
            self.source / source_mass,
            self.alpha,
            params.threshold,
            max_pushes=self.max_pushes,
            adjacency=adjacency_matrix,
        ).run()

        residue = push.residue
        residue_mass = float(residue.sum())
        omega = residue_mass * params.omega_coef
        starts = np.flatnonzero(residue > 0)
        counts = params.walk_counts(residue[starts])
        weights = residue[starts] / counts
        self.logger.debug(
            f"Residue mass {residue_mass:.3e} on {len(starts):,} nodes; omega={omega:.4g}, walks={int(counts.sum()):,}"
        )

        with log_timing(self.logger, "FORA random walks"):
            landed = simulate_walks(
                table,
                WalkPlan.from_sources(starts, counts, weights),
                batch_size=self.batch_size,
                workers=self.workers,
                seed=self.seed,
            )

        estimate = (push.reserve + landed) * source_mass
        log_vector_stats(self.logger, estimate, "fora estimate")

        return ForaResult(
            scores=estimate,
            computation_time=time.time() - start_time,
            push=ForwardPushResult(
                scores=push.reserve * source_mass,
                computation_time=push.computation_time,
                residue=residue * source_mass,
                pushes=push.pushes,
                threshold=push.threshold,
                converged=push.converged,
            ),
            walks=int(counts.sum()),
            omega=omega,
        )


def fora(
    graph: GraphView,
    source: ArrayLike,
    alpha: float = DEFAULT_ALPHA,
    epsilon: float = DEFAULT_EPSILON,
    *,
    delta: float | None = None,
    failure_probability: float | None = None,
    seed: int | None = None,
    workers: int = 1,
) -> np.ndarray:
    """Approximate personalized PageRank with FORA.

    Args:
        graph: Graph to estimate over.
        source: Nonnegative mass per node, length n.
        alpha: Per-step stop probability, in (0, 1). Defaults to 0.15.
        epsilon: Target relative error, in (0, 1). Defaults to 0.5.
        delta: Minimum PPR of interest. Defaults to 1/n.
        failure_probability: Allowed failure probability. Defaults to 1/n.
        seed: RNG seed for reproducible output. Defaults to None.
        workers: Threads to shard walks across. Defaults to 1.

    Returns:
        Estimate of length n summing to approximately ``sum(source)``.

    Raises:
        InvalidArgument: On out-of-range parameters or a source of the wrong length.
    """
    return (
        ForaEstimator(
            graph,
            source,
            alpha,
            epsilon,
            delta=delta,
            failure_probability=failure_probability,
            seed=seed,
            workers=workers,
        )
        .run()
        .scores
    )
