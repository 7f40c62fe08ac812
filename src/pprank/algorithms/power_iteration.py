"""Monte-Carlo PageRank by repeated alpha-terminated random walks.

Each trial starts on a uniformly random node and walks until a draw below
``alpha`` stops it; the stopping node is recorded. Dangling nodes teleport to
a uniformly random node and the same trial continues. The fraction of trials
ending at ``v`` is an unbiased estimate of its damped PageRank, with error
shrinking as ``O(1 / sqrt(iterations))``.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import numpy as np

from pprank.core.config import PowerIterationConfig, WalkConfig
from pprank.core.constants import (
    DEFAULT_ALPHA,
    DEFAULT_BATCH_SIZE,
    DEFAULT_ITERATIONS,
)
from pprank.core.logging import get_logger, log_timing, log_vector_stats
from pprank.core.results import PowerIterationResult
from pprank.core.transition import TransitionTable
from pprank.core.validation import check_open_unit, check_positive_int
from pprank.core.walks import WalkPlan, simulate_walks

if TYPE_CHECKING:
    from pprank.core.protocols import GraphView


class PowerIterationEstimator:
    """Monte-Carlo estimator of global PageRank."""

    def __init__(
        self,
        graph: GraphView,
        alpha: float = DEFAULT_ALPHA,
        iterations: int = DEFAULT_ITERATIONS,
        *,
        seed: int | None = None,
        workers: int = 1,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        """
        Initialize the estimator. Parameters are validated immediately.

        Args:
            graph: Graph to rank.
            alpha: Per-step stop probability, in (0, 1).
            iterations: Number of independent trials, >= 1.
            seed: Seed of this estimator's RNG stream.
            workers: Threads to shard trials across.
            batch_size: Trials advanced together per numpy batch.
        """
        self.graph = graph
        self.alpha = check_open_unit("alpha", alpha)
        self.iterations = check_positive_int("iter", iterations)
        self.seed = seed
        self.workers = check_positive_int("workers", workers)
        self.batch_size = check_positive_int("batch_size", batch_size)

        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    def from_config(
        cls, graph: GraphView, cfg: PowerIterationConfig
    ) -> PowerIterationEstimator:
        walks: WalkConfig = cfg.walks
        return cls(
            graph,
            alpha=cfg.alpha,
            iterations=cfg.iterations,
            seed=walks.seed,
            workers=walks.workers,
            batch_size=walks.batch_size,
        )

    def run(self) -> PowerIterationResult:
        """Simulate every trial and return visit frequencies."""
        start_time = time.time()
        size = self.graph.size()
        if size == 0:
            self.logger.debug("Empty graph; returning empty PageRank vector")
            return PowerIterationResult(
                scores=np.zeros(0),
                computation_time=0.0,
                iterations=self.iterations,
                alpha=self.alpha,
            )

        self.logger.debug(
            f"PageRank by random walks: alpha={self.alpha}, iter={self.iterations:,}, nodes={size:,}"
        )
        table = TransitionTable.from_graph(self.graph, self.alpha)

        with log_timing(self.logger, f"{self.iterations:,} PageRank trials"):
            visits = simulate_walks(
                table,
                WalkPlan.uniform(self.iterations),
                batch_size=self.batch_size,
                workers=self.workers,
                seed=self.seed,
            )

        scores = visits / self.iterations
        log_vector_stats(self.logger, scores, "pagerank")

        return PowerIterationResult(
            scores=scores,
            computation_time=time.time() - start_time,
            iterations=self.iterations,
            alpha=self.alpha,
        )


def power_iteration_pagerank(
    graph: GraphView,
    alpha: float = DEFAULT_ALPHA,
    iter: int = DEFAULT_ITERATIONS,
    *,
    seed: int | None = None,
    workers: int = 1,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> np.ndarray:
    """Estimate PageRank by Monte-Carlo random walks.

    Args:
        graph: Graph to rank.
        alpha: Per-step stop probability, in (0, 1). Defaults to 0.15.
        iter: Number of trials, >= 1. Defaults to 1,000,000.
        seed: RNG seed for reproducible output. Defaults to None.
        workers: Threads to shard trials across. Defaults to 1.
        batch_size: Trials advanced together per batch.

    Returns:
        Vector of length n summing to 1 (empty for an empty graph).

    Raises:
        InvalidArgument: If ``alpha`` or ``iter`` is out of range.
    """
    return (
        PowerIterationEstimator(
            graph,
            alpha,
            iter,
            seed=seed,
            workers=workers,
            batch_size=batch_size,
        )
        .run()
        .scores
    )
