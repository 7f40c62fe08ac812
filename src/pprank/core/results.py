"""Result dataclasses for the PageRank estimators."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import polars as pl


@dataclass
class ScoreResult:
    """A per-node score vector plus run metadata."""

    scores: np.ndarray
    computation_time: float | None = None

    def to_dataframe(
        self,
        id_column: str = "node_id",
        score_column: str = "score",
    ) -> pl.DataFrame:
        """Convert results to a Polars DataFrame.

        Args:
            id_column: Name for ID column. Defaults to "node_id".
            score_column: Name for score column. Defaults to "score".

        Returns:
            DataFrame with one row per node.
        """
        return pl.DataFrame(
            {
                id_column: np.arange(len(self.scores), dtype=np.int64),
                score_column: self.scores,
            }
        )

    def top_n(self, count: int = 10) -> pl.DataFrame:
        """Get the ``count`` highest-scoring nodes.

        Args:
            count: Number of nodes to return. Defaults to 10.

        Returns:
            DataFrame sorted by score, descending; ties keep node id order.
        """
        dataframe = self.to_dataframe()
        return dataframe.sort(
            ["score", "node_id"], descending=[True, False]
        ).head(count)


@dataclass
class PowerIterationResult(ScoreResult):
    """Results of Monte-Carlo PageRank."""

    iterations: int = 0
    alpha: float | None = None


@dataclass
class ForwardPushResult(ScoreResult):
    """Results of forward push. ``scores`` is the reserve vector."""

    residue: np.ndarray | None = None
    pushes: int = 0
    threshold: float | None = None
    converged: bool = True

    @property
    def reserve(self) -> np.ndarray:
        return self.scores

    @property
    def total_mass(self) -> float:
        """Reserve plus residue; equals the source mass."""
        residue_mass = self.residue.sum() if self.residue is not None else 0.0
        return float(self.scores.sum() + residue_mass)

    def to_dataframe(
        self,
        id_column: str = "node_id",
        score_column: str = "score",
    ) -> pl.DataFrame:
        dataframe = super().to_dataframe(id_column, score_column)
        if self.residue is not None:
            dataframe = dataframe.with_columns(
                pl.Series("residue", self.residue)
            )
        return dataframe


@dataclass
class ForaResult(ScoreResult):
    """Results of FORA. ``scores`` is reserve plus walk contributions."""

    push: ForwardPushResult | None = None
    walks: int = 0
    omega: float = 0.0

    @property
    def reserve(self) -> np.ndarray | None:
        return self.push.reserve if self.push is not None else None

    @property
    def residue(self) -> np.ndarray | None:
        return self.push.residue if self.push is not None else None

    def to_dataframe(
        self,
        id_column: str = "node_id",
        score_column: str = "score",
    ) -> pl.DataFrame:
        dataframe = super().to_dataframe(id_column, score_column)
        if self.push is not None:
            dataframe = dataframe.with_columns(
                pl.Series("reserve", self.push.reserve),
                pl.Series("residue", self.push.residue),
            )
        return dataframe
