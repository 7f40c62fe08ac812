"""Configuration dataclasses for the PageRank estimators."""

from dataclasses import dataclass, field
from typing import Optional

from pprank.core.constants import (
    DEFAULT_ALPHA,
    DEFAULT_BATCH_SIZE,
    DEFAULT_EPSILON,
    DEFAULT_ITERATIONS,
    DEFAULT_PUSH_THRESHOLD,
    DEFAULT_WORKERS,
)


@dataclass(frozen=True)
class WalkConfig:
    """Settings shared by every estimator that simulates random walks."""

    # Walks advanced together in one numpy batch
    batch_size: int = DEFAULT_BATCH_SIZE

    # Threads the walk batches are sharded across
    workers: int = DEFAULT_WORKERS

    # Seed for the per-call RNG stream; None draws fresh OS entropy
    seed: Optional[int] = None


@dataclass(frozen=True)
class PowerIterationConfig:
    """Configuration for Monte-Carlo PageRank."""

    alpha: float = DEFAULT_ALPHA
    iterations: int = DEFAULT_ITERATIONS
    walks: WalkConfig = field(default_factory=WalkConfig)


@dataclass(frozen=True)
class ForwardPushConfig:
    """Configuration for forward push."""

    alpha: float = DEFAULT_ALPHA
    threshold: float = DEFAULT_PUSH_THRESHOLD

    # Caller-imposed cap on pushes; None runs to convergence
    max_pushes: Optional[int] = None


@dataclass(frozen=True)
class ForaConfig:
    """Configuration for FORA (forward push plus random walks)."""

    alpha: float = DEFAULT_ALPHA
    epsilon: float = DEFAULT_EPSILON

    # Minimum PPR value of interest; defaults to 1/n
    delta: Optional[float] = None

    # Failure probability of the error guarantee; defaults to 1/n
    failure_probability: Optional[float] = None

    max_pushes: Optional[int] = None
    walks: WalkConfig = field(default_factory=WalkConfig)
