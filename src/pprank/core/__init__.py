"""Core components shared by the PageRank estimators."""

from pprank.core.config import (
    ForaConfig,
    ForwardPushConfig,
    PowerIterationConfig,
    WalkConfig,
)
from pprank.core.exceptions import (
    EmptyGraph,
    InvalidArgument,
    NodeNotFound,
    PageRankError,
)
from pprank.core.graph import (
    AdjacencyGraph,
    GraphBuilder,
    adjacency_csr,
    out_weight_sums,
)
from pprank.core.protocols import GraphView
from pprank.core.results import (
    ForaResult,
    ForwardPushResult,
    PowerIterationResult,
    ScoreResult,
)
from pprank.core.source import (
    CustomSource,
    OutWeightSource,
    SingleNodeSource,
    SourceStrategy,
    UniformSource,
    single_node,
    uniform,
)
from pprank.core.transition import TransitionTable
from pprank.core.validation import require_nonempty
from pprank.core.walks import WalkPlan, simulate_walks, walk_terminals

__all__ = [
    # Config
    "WalkConfig",
    "PowerIterationConfig",
    "ForwardPushConfig",
    "ForaConfig",
    # Errors
    "PageRankError",
    "InvalidArgument",
    "NodeNotFound",
    "EmptyGraph",
    "require_nonempty",
    # Graph
    "GraphView",
    "AdjacencyGraph",
    "GraphBuilder",
    "adjacency_csr",
    "out_weight_sums",
    # Results
    "ScoreResult",
    "PowerIterationResult",
    "ForwardPushResult",
    "ForaResult",
    # Sources
    "SourceStrategy",
    "UniformSource",
    "SingleNodeSource",
    "CustomSource",
    "OutWeightSource",
    "uniform",
    "single_node",
    # Walks
    "TransitionTable",
    "WalkPlan",
    "simulate_walks",
    "walk_terminals",
]
