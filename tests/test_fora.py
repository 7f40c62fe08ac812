"""Tests for FORA (forward push plus random walks)."""

import math

import numpy as np
import pytest

from pprank import (
    AdjacencyGraph,
    ForaConfig,
    ForaEstimator,
    ForaParameters,
    InvalidArgument,
    WalkConfig,
    fora,
    forward_push,
)


def teleporting_ppr(graph, source, alpha, rounds=1_000):
    """PPR where dangling nodes jump to a uniformly random node."""
    size = graph.size()
    transition = np.zeros((size, size))
    for src in range(size):
        adjacents = graph.adjacents(src)
        total = sum(adjacents.values())
        if total == 0:
            transition[src] = 1.0 / size
        for dst, weight in adjacents.items():
            transition[src, dst] = weight / total

    source = np.asarray(source, dtype=float)
    ppr = source.copy()
    for _ in range(rounds):
        ppr = alpha * source + (1 - alpha) * ppr @ transition
    return ppr


class CountingGraph:
    """GraphView wrapper that counts adjacency reads."""

    def __init__(self, graph):
        self.graph = graph
        self.reads = 0

    def size(self):
        return self.graph.size()

    def adjacents(self, node_id):
        self.reads += 1
        return self.graph.adjacents(node_id)


class TestForaParameters:
    """Test the published threshold and walk-budget formulas."""

    def test_default_delta_and_failure_probability(self):
        cycle = AdjacencyGraph.from_edges([(0, 1), (1, 2), (2, 0)])
        params = ForaEstimator(cycle, [1.0, 0.0, 0.0], alpha=0.15, epsilon=0.5).parameters()

        coef = (2 * 0.5 / 3 + 2) * math.log(6) / (0.5**2 / 3)
        assert params.delta == pytest.approx(1 / 3)
        assert params.failure_probability == pytest.approx(1 / 3)
        assert params.total_weight == pytest.approx(3.0)
        assert params.omega_coef == pytest.approx(coef)
        assert params.threshold == pytest.approx(1 / math.sqrt(coef * 3))

    def test_smaller_epsilon_means_more_walks_and_lower_threshold(self):
        loose = ForaParameters.derive(0.5, 0.01, 0.01, total_weight=100.0)
        tight = ForaParameters.derive(0.1, 0.01, 0.01, total_weight=100.0)

        assert tight.omega_coef > loose.omega_coef
        assert tight.threshold < loose.threshold

    def test_walk_counts_round_up(self):
        params = ForaParameters.derive(0.5, 0.5, 0.5, total_weight=1.0)
        counts = params.walk_counts(np.array([1e-9, 0.5 / params.omega_coef, 0.0]))
        np.testing.assert_array_equal(counts, [1, 1, 0])

    def test_edgeless_graph_threshold(self):
        params = ForaParameters.derive(0.5, 0.5, 0.5, total_weight=0.0)
        assert params.threshold == pytest.approx(1 / math.sqrt(params.omega_coef))


class TestFora:
    """Test FORA estimates."""

    def setup_method(self):
        self.cycle = AdjacencyGraph.from_edges([(0, 1), (1, 2), (2, 0)])
        self.graph = AdjacencyGraph.from_edges(
            [
                (0, 1, 2.0),
                (0, 3, 1.0),
                (1, 2, 1.0),
                (2, 0, 1.0),
                (2, 4, 4.0),
                (3, 3, 1.0),
                (3, 4, 1.0),
                (4, 0, 1.0),
            ]
        )

    def test_sums_to_source_mass(self):
        estimate = fora(self.graph, [1.0, 0, 0, 0, 0], alpha=0.15, epsilon=0.5, seed=1)
        assert estimate.sum() == pytest.approx(1.0, abs=1e-9)

    def test_unnormalized_source(self):
        estimate = fora(self.graph, [2.0, 0, 1.0, 0, 1.0], alpha=0.15, epsilon=0.5, seed=2)
        assert estimate.sum() == pytest.approx(4.0, abs=1e-9)

    def test_agrees_with_converged_forward_push(self):
        source = [1.0, 0, 0, 0, 0]
        reference, _ = forward_push(self.graph, source, alpha=0.15, thr=1e-12)
        estimate = fora(self.graph, source, alpha=0.15, epsilon=0.1, seed=3)

        assert np.all(np.abs(estimate - reference) <= 0.1 * reference)

    def test_small_epsilon_converges_on_cycle(self):
        source = [1.0, 0.0, 0.0]
        reference, _ = forward_push(self.cycle, source, alpha=0.15, thr=1e-12)
        estimate = fora(self.cycle, source, alpha=0.15, epsilon=0.02, seed=4)

        np.testing.assert_allclose(estimate, reference, atol=0.005)

    def test_dangling_chain_resolved_by_push(self):
        chain = AdjacencyGraph.from_edges([(0, 1), (1, 2)], num_nodes=3)
        result = ForaEstimator(chain, [1.0, 0.0, 0.0], alpha=0.15, epsilon=0.5, seed=5).run()

        assert result.walks == 0
        np.testing.assert_allclose(result.scores, [0.15, 0.1275, 0.7225], atol=1e-12)

    def test_dangling_mass_teleports_during_walks(self):
        """With pushes disabled, walks reaching a dangling node jump uniformly."""
        star = AdjacencyGraph.from_edges([(0, 1), (0, 2), (0, 3)])
        source = [1.0, 0.0, 0.0, 0.0]
        result = ForaEstimator(
            star, source, alpha=0.15, epsilon=0.05, max_pushes=0, seed=6
        ).run()

        assert result.push.pushes == 0
        assert result.walks > 0
        assert np.all(np.isfinite(result.scores))
        assert result.scores.sum() == pytest.approx(1.0, abs=1e-9)
        np.testing.assert_allclose(
            result.scores, teleporting_ppr(star, source, 0.15), atol=0.03
        )

    def test_result_bookkeeping(self):
        result = ForaEstimator(
            self.graph, [1.0, 0, 0, 0, 0], alpha=0.15, epsilon=0.3, seed=7
        ).run()

        params = ForaEstimator(self.graph, [1.0, 0, 0, 0, 0], epsilon=0.3).parameters()
        residue_mass = result.residue.sum()
        assert result.reserve.sum() + residue_mass == pytest.approx(1.0, abs=1e-9)
        assert result.omega == pytest.approx(residue_mass * params.omega_coef)
        assert result.walks >= math.ceil(result.omega)
        assert result.push.converged
        assert np.all(result.scores >= result.reserve)
        assert result.to_dataframe().columns == ["node_id", "score", "reserve", "residue"]

    def test_seeded_runs_are_reproducible(self):
        source = [0.2] * 5
        first = fora(self.graph, source, alpha=0.15, epsilon=0.2, seed=8)
        second = fora(self.graph, source, alpha=0.15, epsilon=0.2, seed=8)
        np.testing.assert_array_equal(first, second)

    def test_workers(self):
        estimate = fora(self.graph, [1.0, 0, 0, 0, 0], epsilon=0.1, seed=9, workers=3)
        assert estimate.sum() == pytest.approx(1.0, abs=1e-9)

    def test_graph_is_scanned_once(self):
        counting = CountingGraph(self.graph)
        estimate = fora(counting, [1.0, 0, 0, 0, 0], epsilon=0.3, seed=11)

        assert counting.reads == self.graph.size()
        assert estimate.sum() == pytest.approx(1.0, abs=1e-9)

    def test_from_config(self):
        cfg = ForaConfig(alpha=0.2, epsilon=0.25, delta=0.1, walks=WalkConfig(seed=10))
        estimator = ForaEstimator.from_config(self.graph, [1.0, 0, 0, 0, 0], cfg)

        assert estimator.delta == 0.1
        assert estimator.failure_probability == pytest.approx(0.2)
        assert estimator.run().scores.sum() == pytest.approx(1.0, abs=1e-9)

    def test_zero_source(self):
        estimate = fora(self.cycle, [0.0, 0.0, 0.0], alpha=0.15, epsilon=0.5)
        np.testing.assert_array_equal(estimate, np.zeros(3))

    def test_empty_graph(self):
        assert fora(AdjacencyGraph([]), [], alpha=0.15, epsilon=0.5).shape == (0,)


class TestForaValidation:
    """Test parameter validation."""

    def setup_method(self):
        self.graph = AdjacencyGraph.from_edges([(0, 1), (1, 0)])

    @pytest.mark.parametrize("epsilon", [0.0, 1.0, -0.5, 3.0])
    def test_epsilon(self, epsilon):
        with pytest.raises(InvalidArgument):
            fora(self.graph, [1.0, 0.0], alpha=0.15, epsilon=epsilon)

    @pytest.mark.parametrize("alpha", [0.0, 1.0])
    def test_alpha(self, alpha):
        with pytest.raises(InvalidArgument):
            fora(self.graph, [1.0, 0.0], alpha=alpha, epsilon=0.5)

    def test_source_length(self):
        with pytest.raises(InvalidArgument):
            fora(self.graph, [1.0], alpha=0.15, epsilon=0.5)

    def test_negative_source(self):
        with pytest.raises(InvalidArgument):
            fora(self.graph, [1.0, -0.1], alpha=0.15, epsilon=0.5)

    @pytest.mark.parametrize("delta", [0.0, 1.5])
    def test_delta(self, delta):
        with pytest.raises(InvalidArgument):
            fora(self.graph, [1.0, 0.0], epsilon=0.5, delta=delta)

    @pytest.mark.parametrize("failure_probability", [0.0, -1.0, 2.0])
    def test_failure_probability(self, failure_probability):
        with pytest.raises(InvalidArgument):
            fora(self.graph, [1.0, 0.0], epsilon=0.5, failure_probability=failure_probability)
