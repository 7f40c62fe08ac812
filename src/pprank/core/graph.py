"""Frozen in-memory weighted digraph implementing :class:`GraphView`.

Nodes live in a dense arena indexed by id; each arena slot is the node's
``{neighbor: weight}`` out-adjacency. There are no node objects and no back
references, so the adjacency is the only view of the graph.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, Mapping, Sequence

import numpy as np
import polars as pl
import scipy.sparse as sp

from pprank.core.exceptions import InvalidArgument, NodeNotFound
from pprank.core.logging import get_logger

if TYPE_CHECKING:
    from pprank.core.protocols import GraphView

logger = get_logger(__name__)


class AdjacencyGraph:
    """Immutable weighted digraph over node ids ``[0, n)``."""

    __slots__ = ("_adjacency",)

    def __init__(self, adjacency: Sequence[Mapping[int, float]]) -> None:
        self._adjacency = tuple(
            MappingProxyType(dict(neighbors)) for neighbors in adjacency
        )

    def __repr__(self) -> str:
        return f"AdjacencyGraph(nodes={self.size()}, edges={self.edge_count()})"

    def size(self) -> int:
        return len(self._adjacency)

    def __len__(self) -> int:
        return self.size()

    def adjacents(self, node_id: int) -> Mapping[int, float]:
        if (
            isinstance(node_id, bool)
            or not isinstance(node_id, (int, np.integer))
            or not 0 <= node_id < len(self._adjacency)
        ):
            raise NodeNotFound(node_id, len(self._adjacency))
        return self._adjacency[node_id]

    def edge_count(self) -> int:
        return sum(len(neighbors) for neighbors in self._adjacency)

    def out_weight_sums(self) -> np.ndarray:
        """Total outgoing weight of every node."""
        return out_weight_sums(self)

    def to_csr(self) -> sp.csr_matrix:
        """Out-adjacency as an ``n x n`` CSR matrix (row = source)."""
        return adjacency_csr(self)

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[Sequence[float]],
        num_nodes: int | None = None,
        directed: bool = True,
    ) -> AdjacencyGraph:
        """Build a graph from ``(src, dst)`` or ``(src, dst, weight)`` tuples.

        Args:
            edges: Edge tuples. Missing weights default to 1.0.
            num_nodes: Number of nodes. Defaults to ``1 + max id`` seen.
            directed: If False every edge is mirrored. Defaults to True.

        Returns:
            Frozen graph.
        """
        edge_list = [tuple(edge) for edge in edges]

        if num_nodes is None:
            num_nodes = 0
            for edge in edge_list:
                num_nodes = max(num_nodes, int(edge[0]) + 1, int(edge[1]) + 1)

        builder = GraphBuilder(directed=directed)
        builder.add_nodes(num_nodes)
        for edge in edge_list:
            if len(edge) == 2:
                builder.add_edge(int(edge[0]), int(edge[1]))
            elif len(edge) == 3:
                builder.add_edge(int(edge[0]), int(edge[1]), float(edge[2]))
            else:
                raise InvalidArgument(
                    "edge", edge, "(src, dst) or (src, dst, weight)"
                )
        return builder.build()

    @classmethod
    def from_dataframe(
        cls,
        edges: pl.DataFrame,
        source_column: str = "source",
        target_column: str = "target",
        weight_column: str | None = None,
        num_nodes: int | None = None,
        directed: bool = True,
    ) -> AdjacencyGraph:
        """Build a graph from a polars edge DataFrame.

        Args:
            edges: One row per edge with integer node ids.
            source_column: Column holding source ids. Defaults to "source".
            target_column: Column holding target ids. Defaults to "target".
            weight_column: Optional column of edge weights; 1.0 when None.
            num_nodes: Number of nodes. Defaults to ``1 + max id`` seen.
            directed: If False every edge is mirrored. Defaults to True.

        Returns:
            Frozen graph.
        """
        for column in (source_column, target_column, weight_column):
            if column is not None and column not in edges.columns:
                raise InvalidArgument(
                    "column", column, f"one of {edges.columns}"
                )

        weight_expr = (
            pl.col(weight_column).cast(pl.Float64)
            if weight_column is not None
            else pl.lit(1.0, dtype=pl.Float64)
        )
        triplets = edges.select(
            pl.col(source_column).cast(pl.Int64).alias("src"),
            pl.col(target_column).cast(pl.Int64).alias("dst"),
            weight_expr.alias("weight"),
        )
        if not directed:
            triplets = pl.concat(
                [
                    triplets,
                    triplets.select(
                        pl.col("dst").alias("src"),
                        pl.col("src").alias("dst"),
                        "weight",
                    ).filter(pl.col("src") != pl.col("dst")),
                ]
            )

        triplets = triplets.group_by(["src", "dst"]).agg(pl.col("weight").sum())

        if num_nodes is None:
            num_nodes = (
                int(max(triplets["src"].max(), triplets["dst"].max())) + 1
                if triplets.height
                else 0
            )

        builder = GraphBuilder()
        builder.add_nodes(num_nodes)
        for src, dst, weight in triplets.sort(["src", "dst"]).iter_rows():
            builder.add_edge(src, dst, weight)

        logger.debug(
            f"Built graph from {edges.height:,} edge rows: {num_nodes:,} nodes, {triplets.height:,} edges"
        )
        return builder.build()


class GraphBuilder:
    """Incrementally assemble an :class:`AdjacencyGraph`.

    Ids are handed out by a counter owned by the builder, so two builders
    never share id state.

    Examples:
        >>> builder = GraphBuilder()
        >>> a, b = builder.add_node(), builder.add_node()
        >>> builder.add_edge(a, b, 2.0)
        >>> graph = builder.build()
    """

    def __init__(self, directed: bool = True) -> None:
        self.directed = directed
        self._next_id = 0
        self._adjacency: list[dict[int, float]] = []

    def __len__(self) -> int:
        return self._next_id

    def add_node(self) -> int:
        node_id = self._next_id
        self._adjacency.append({})
        self._next_id += 1
        return node_id

    def add_nodes(self, count: int) -> range:
        """Add ``count`` nodes and return their ids."""
        if count < 0:
            raise InvalidArgument("count", count, "an integer >= 0")
        start = self._next_id
        for _ in range(count):
            self.add_node()
        return range(start, self._next_id)

    def add_edge(self, src: int, dst: int, weight: float = 1.0) -> None:
        """Add ``weight`` to the edge ``src -> dst``.

        Repeated edges accumulate their weights. Undirected builders also add
        ``dst -> src``.
        """
        for node_id in (src, dst):
            if not 0 <= node_id < self._next_id:
                raise NodeNotFound(node_id, self._next_id)
        if not np.isfinite(weight) or weight < 0:
            raise InvalidArgument("weight", weight, "a finite number >= 0")

        self._accumulate(src, dst, weight)
        if not self.directed and src != dst:
            self._accumulate(dst, src, weight)

    def _accumulate(self, src: int, dst: int, weight: float) -> None:
        neighbors = self._adjacency[src]
        neighbors[dst] = neighbors.get(dst, 0.0) + float(weight)

    def build(self) -> AdjacencyGraph:
        return AdjacencyGraph(self._adjacency)


def out_weight_sums(graph: GraphView) -> np.ndarray:
    """Sum of outgoing edge weights per node for any :class:`GraphView`."""
    size = graph.size()
    sums = np.zeros(size, dtype=np.float64)
    for node_id in range(size):
        sums[node_id] = sum(graph.adjacents(node_id).values())
    return sums


def adjacency_csr(graph: GraphView) -> sp.csr_matrix:
    """Assemble the out-adjacency of any :class:`GraphView` as CSR.

    Zero-weight edges are dropped; column indices are sorted within rows.
    """
    size = graph.size()
    rows: list[int] = []
    cols: list[int] = []
    weights: list[float] = []
    for src in range(size):
        for dst, weight in graph.adjacents(src).items():
            if not 0 <= dst < size:
                raise NodeNotFound(dst, size)
            if not np.isfinite(weight) or weight < 0:
                raise InvalidArgument(
                    f"weight({src}->{dst})", weight, "a finite number >= 0"
                )
            if weight > 0:
                rows.append(src)
                cols.append(dst)
                weights.append(weight)

    adjacency_matrix = sp.csr_matrix(
        (
            np.asarray(weights, dtype=np.float64),
            (
                np.asarray(rows, dtype=np.int64),
                np.asarray(cols, dtype=np.int64),
            ),
        ),
        shape=(size, size),
    )
    adjacency_matrix.sum_duplicates()
    adjacency_matrix.sort_indices()
    return adjacency_matrix
