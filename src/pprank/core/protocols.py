"""Protocol definitions for the graphs the estimators read."""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class GraphView(Protocol):
    """Read-only access to a weighted directed graph.

    Node ids form the dense range ``[0, size())``. The estimators never
    mutate the graph and assume nobody else does while they run.
    """

    def size(self) -> int:
        """Return the number of nodes."""
        ...

    def adjacents(self, node_id: int) -> Mapping[int, float]:
        """Return the out-adjacency of ``node_id`` as ``{neighbor: weight}``.

        Raises:
            NodeNotFound: If ``node_id`` is outside ``[0, size())``.
        """
        ...
