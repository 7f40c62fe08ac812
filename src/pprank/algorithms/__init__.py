"""PageRank and personalized PageRank estimators."""

from pprank.algorithms.fora import ForaEstimator, ForaParameters, fora
from pprank.algorithms.forward_push import ForwardPushEngine, forward_push
from pprank.algorithms.power_iteration import (
    PowerIterationEstimator,
    power_iteration_pagerank,
)

__all__ = [
    "PowerIterationEstimator",
    "power_iteration_pagerank",
    "ForwardPushEngine",
    "forward_push",
    "ForaEstimator",
    "ForaParameters",
    "fora",
]
