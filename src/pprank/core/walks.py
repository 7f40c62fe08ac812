"""Vectorised simulation of independent alpha-terminated random walks.

Walks are advanced in lockstep batches: at every round each live walk draws
``r ~ U[0, 1)``, walks with ``r < alpha`` stop at their current node, and
the rest take one step through the :class:`TransitionTable`. Batches are
independent, so they can be spread over worker threads, each with its own
child RNG stream; per-worker landing totals are summed at the end.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from pprank.core.logging import get_logger

if TYPE_CHECKING:
    from pprank.core.transition import TransitionTable

logger = get_logger(__name__)


@dataclass(frozen=True)
class WalkPlan:
    """Which walks to run and how much mass each one carries.

    ``starts`` is None for uniformly random start nodes. Otherwise walk
    ``i`` starts at ``starts[j]`` where ``j`` is the slot of ``i`` in
    ``counts``, and lands ``weights[j]`` on its terminal node.
    """

    total: int
    starts: np.ndarray | None = None
    counts: np.ndarray | None = None
    weights: np.ndarray | None = None
    offsets: np.ndarray | None = None

    @classmethod
    def uniform(cls, total: int) -> WalkPlan:
        return cls(total=int(total))

    @classmethod
    def from_sources(
        cls, starts: np.ndarray, counts: np.ndarray, weights: np.ndarray
    ) -> WalkPlan:
        counts = np.asarray(counts, dtype=np.int64)
        return cls(
            total=int(counts.sum()),
            starts=np.asarray(starts, dtype=np.int64),
            counts=counts,
            weights=np.asarray(weights, dtype=np.float64),
            offsets=np.cumsum(counts),
        )

    def batch(
        self, begin: int, end: int, size: int, rng: np.random.Generator
    ) -> tuple[np.ndarray, np.ndarray | None]:
        """Start nodes and landing weights for walks ``[begin, end)``."""
        if self.starts is None:
            return rng.integers(0, size, size=end - begin), None
        slots = np.searchsorted(self.offsets, np.arange(begin, end), side="right")
        return self.starts[slots], self.weights[slots]


def walk_terminals(
    table: TransitionTable,
    starts: np.ndarray,
    rng: np.random.Generator,
) -> np.ndarray:
    """Run one walk from every entry of ``starts`` and return where each stops."""
    terminals = np.empty(len(starts), dtype=np.int64)
    live = np.arange(len(starts))
    nodes = np.asarray(starts, dtype=np.int64).copy()

    while live.size:
        draws = rng.random(live.size)
        stopping = draws < table.alpha
        terminals[live[stopping]] = nodes[stopping]

        moving = ~stopping
        live = live[moving]
        nodes = table.advance(nodes[moving], draws[moving], rng)

    return terminals


def simulate_walks(
    table: TransitionTable,
    plan: WalkPlan,
    *,
    batch_size: int,
    workers: int = 1,
    seed: int | np.random.SeedSequence | None = None,
) -> np.ndarray:
    """Run every walk in ``plan`` and total the mass landing on each node.

    Args:
        table: Transition table of the graph.
        plan: Walks to run.
        batch_size: Walks advanced together per batch.
        workers: Threads to shard batches across. Defaults to 1.
        seed: Seed for this call's RNG stream. Defaults to None (fresh entropy).

    Returns:
        Float array of length ``table.size``: landing counts, or landing
        weights when the plan carries weights.
    """
    size = table.size
    if plan.total == 0 or size == 0:
        return np.zeros(size, dtype=np.float64)

    seed_sequence = (
        seed
        if isinstance(seed, np.random.SeedSequence)
        else np.random.SeedSequence(seed)
    )
    ranges = [
        (begin, min(begin + batch_size, plan.total))
        for begin in range(0, plan.total, batch_size)
    ]
    workers = max(1, min(workers, len(ranges)))
    generators = [
        np.random.default_rng(child) for child in seed_sequence.spawn(workers)
    ]

    def run_shard(shard: int) -> np.ndarray:
        rng = generators[shard]
        landed = np.zeros(size, dtype=np.float64)
        for begin, end in ranges[shard::workers]:
            starts, weights = plan.batch(begin, end, size, rng)
            terminals = walk_terminals(table, starts, rng)
            landed += np.bincount(terminals, weights=weights, minlength=size)
        return landed

    logger.debug(
        f"Simulating {plan.total:,} walks in {len(ranges):,} batches on {workers} worker(s)"
    )
    if workers == 1:
        return run_shard(0)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        shards = list(executor.map(run_shard, range(workers)))
    return np.sum(shards, axis=0)
