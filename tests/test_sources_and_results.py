"""Tests for source strategies and result containers."""

import numpy as np
import pytest

from pprank import (
    AdjacencyGraph,
    CustomSource,
    ForwardPushResult,
    InvalidArgument,
    NodeNotFound,
    OutWeightSource,
    SingleNodeSource,
    UniformSource,
    forward_push,
)
from pprank.core.results import ScoreResult
from pprank.core.source import SourceStrategy, single_node, uniform


class TestSourceStrategies:
    """Test source vector construction."""

    def setup_method(self):
        self.graph = AdjacencyGraph.from_edges(
            [(0, 1, 1.0), (0, 2, 3.0), (1, 0, 4.0)], num_nodes=4
        )

    def test_strategies_satisfy_protocol(self):
        for strategy in (
            UniformSource(),
            SingleNodeSource(0),
            CustomSource({0: 1.0}),
            OutWeightSource(),
        ):
            assert isinstance(strategy, SourceStrategy)

    def test_uniform(self):
        np.testing.assert_allclose(uniform(self.graph), [0.25] * 4)
        np.testing.assert_allclose(UniformSource(total=8.0)(self.graph), [2.0] * 4)

    def test_uniform_empty_graph(self):
        assert UniformSource()(AdjacencyGraph([])).shape == (0,)

    def test_single_node(self):
        np.testing.assert_array_equal(single_node(self.graph, 2), [0, 0, 1, 0])
        with pytest.raises(NodeNotFound):
            single_node(self.graph, 4)

    def test_custom(self):
        vector = CustomSource({1: 3.0, 3: 1.0}, normalize=True)(self.graph)
        np.testing.assert_allclose(vector, [0.0, 0.75, 0.0, 0.25])

    def test_custom_rejects_bad_entries(self):
        with pytest.raises(NodeNotFound):
            CustomSource({7: 1.0})(self.graph)
        with pytest.raises(InvalidArgument):
            CustomSource({0: -1.0})(self.graph)

    def test_out_weight(self):
        np.testing.assert_allclose(OutWeightSource()(self.graph), [0.5, 0.5, 0.0, 0.0])

    def test_out_weight_edgeless_falls_back_to_uniform(self):
        graph = AdjacencyGraph.from_edges([], num_nodes=2)
        np.testing.assert_allclose(OutWeightSource()(graph), [0.5, 0.5])

    def test_feeds_forward_push(self):
        source = SingleNodeSource(1)(self.graph)
        reserve, residue = forward_push(self.graph, source, alpha=0.15, thr=1e-6)
        assert reserve.sum() + residue.sum() == pytest.approx(1.0)


class TestResults:
    """Test result dataframes and helpers."""

    def test_top_n_orders_by_score_then_id(self):
        result = ScoreResult(scores=np.array([0.1, 0.4, 0.1, 0.4]))
        top = result.top_n(3)

        assert top["node_id"].to_list() == [1, 3, 0]
        assert top["score"].to_list() == [0.4, 0.4, 0.1]

    def test_custom_column_names(self):
        result = ScoreResult(scores=np.array([1.0]))
        dataframe = result.to_dataframe(id_column="id", score_column="ppr")
        assert dataframe.columns == ["id", "ppr"]

    def test_forward_push_total_mass(self):
        result = ForwardPushResult(
            scores=np.array([0.5, 0.25]), residue=np.array([0.2, 0.05])
        )
        assert result.total_mass == pytest.approx(1.0)
        assert result.reserve is result.scores
