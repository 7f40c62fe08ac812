"""Monte-Carlo, forward-push and FORA estimators of (personalized) PageRank."""

from __future__ import annotations

# Estimators - Main API
from pprank.algorithms import (
    ForaEstimator,
    ForaParameters,
    ForwardPushEngine,
    PowerIterationEstimator,
    fora,
    forward_push,
    power_iteration_pagerank,
)
from pprank.core import (
    AdjacencyGraph,
    CustomSource,
    EmptyGraph,
    ForaConfig,
    ForaResult,
    ForwardPushConfig,
    ForwardPushResult,
    GraphBuilder,
    GraphView,
    InvalidArgument,
    NodeNotFound,
    OutWeightSource,
    PageRankError,
    PowerIterationConfig,
    PowerIterationResult,
    SingleNodeSource,
    UniformSource,
    WalkConfig,
)
from pprank.core.constants import (
    DEFAULT_ALPHA,
    DEFAULT_EPSILON,
    DEFAULT_ITERATIONS,
    DEFAULT_PUSH_THRESHOLD,
)
from pprank.core.logging import setup_logging

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "power_iteration_pagerank",
    "forward_push",
    "fora",
    # Estimators
    "PowerIterationEstimator",
    "ForwardPushEngine",
    "ForaEstimator",
    "ForaParameters",
    # Graphs
    "GraphView",
    "AdjacencyGraph",
    "GraphBuilder",
    # Sources
    "UniformSource",
    "SingleNodeSource",
    "CustomSource",
    "OutWeightSource",
    # Config
    "WalkConfig",
    "PowerIterationConfig",
    "ForwardPushConfig",
    "ForaConfig",
    # Results
    "PowerIterationResult",
    "ForwardPushResult",
    "ForaResult",
    # Errors
    "PageRankError",
    "InvalidArgument",
    "NodeNotFound",
    "EmptyGraph",
    # Constants
    "DEFAULT_ALPHA",
    "DEFAULT_EPSILON",
    "DEFAULT_ITERATIONS",
    "DEFAULT_PUSH_THRESHOLD",
    # Logging
    "setup_logging",
    # Version
    "__version__",
]
