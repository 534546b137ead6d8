"""
Unit tests for network evaluation.
"""

import math

import pytest

from neatevo.run.config        import Config
from neatevo.phenotype.network import LabeledNetwork, sigmoid, simulate


# ============================================================================
# Test: Sigmoid
# ============================================================================

class TestSigmoid:
    """Test the logistic squash function."""

    def test_zero(self):
        assert sigmoid(0.0) == 0.5

    def test_known_values(self):
        assert sigmoid(1.0)  == pytest.approx(1.0 / (1.0 + math.exp(-1.0)))
        assert sigmoid(-2.0) == pytest.approx(1.0 / (1.0 + math.exp(2.0)))

    def test_symmetry(self):
        """sigmoid(x) + sigmoid(-x) == 1"""
        for x in (0.1, 0.7, 3.0, 12.5):
            assert sigmoid(x) + sigmoid(-x) == pytest.approx(1.0)

    def test_no_overflow(self):
        """Extreme inputs saturate instead of overflowing."""
        assert sigmoid(1000.0) == pytest.approx(1.0)
        assert sigmoid(-1000.0) == pytest.approx(0.0)


# ============================================================================
# Test: simulate
# ============================================================================

class TestSimulate:
    """Test evaluation of the network encoded by a genome."""

    def test_hand_built_network(self, make_genome):
        """
        Sensors 0, 1; output 2; hidden 3.
            3 = sigmoid(1.0 * x0 - 1.0 * x1)
            2 = sigmoid(2.0 * h3 + 0.5 * x0)
        """
        genome = make_genome([(0, 3, 1.0), (1, 3, -1.0), (3, 2, 2.0), (0, 2, 0.5)])
        hidden = sigmoid(1.0 * 1.0 - 1.0 * 0.5)
        assert simulate(genome, [1.0, 0.5]) == [pytest.approx(sigmoid(2.0 * hidden + 0.5 * 1.0))]

    def test_sensor_values_not_squashed(self, make_genome):
        """Sensor nodes pass their input through unchanged."""
        genome = make_genome([(0, 2, 1.0)])
        assert simulate(genome, [3.0, 0.0]) == [pytest.approx(sigmoid(3.0))]

    def test_unconnected_output(self, make_genome):
        """An output without incoming connections evaluates to sigmoid(0) = 0.5."""
        genome = make_genome()
        assert simulate(genome, [1.0, 1.0]) == [0.5]

    def test_disabled_genes_ignored(self, make_genome):
        """Disabled connections do not contribute."""
        genome = make_genome([(0, 2, 1.0, False), (1, 2, 2.0)])
        assert simulate(genome, [5.0, 1.0]) == [pytest.approx(sigmoid(2.0))]

    def test_unconnected_hidden_node(self, make_genome):
        """A hidden node without incoming connections contributes 0.5 * weight."""
        genome = make_genome([(0, 3, 1.0, False), (3, 2, 2.0)])
        assert simulate(genome, [1.0, 1.0]) == [pytest.approx(sigmoid(1.0))]

    def test_multiple_outputs(self, registry, make_genome):
        """Outputs are returned in output node order."""
        config = Config(num_inputs=1, num_outputs=2)
        genome = make_genome([(0, 1, 1.0), (0, 2, -1.0)], genome_config=config)
        assert simulate(genome, [2.0]) == [pytest.approx(sigmoid(2.0)), pytest.approx(sigmoid(-2.0))]

    def test_shared_subnetworks(self, make_genome):
        """
        A ladder of 25 layers, each node feeding both nodes of the next layer.
        Without memoization the evaluation would take 2^25 node visits.
        """
        connections = [(0, 3, 0.5), (1, 3, 0.5), (0, 4, 0.5), (1, 4, 0.5)]
        for layer in range(24):
            first = 3 + 2 * layer
            for source in (first, first + 1):
                for target in (first + 2, first + 3):
                    connections.append((source, target, 0.5))
        last = 3 + 2 * 24
        connections += [(last, 2, 0.5), (last + 1, 2, 0.5)]
        genome = make_genome(connections)

        value = sigmoid(0.5 * (1.0 + 1.0))
        for _ in range(24):
            value = sigmoid(value)
        assert simulate(genome, [1.0, 1.0]) == [pytest.approx(sigmoid(value))]

    def test_deep_chain(self, make_genome):
        """A chain of 1500 hidden nodes is evaluated, deeper than the interpreter's recursion limit."""
        depth       = 1500
        connections = [(0, 3, 1.0)]
        connections += [(node, node + 1, 1.0) for node in range(3, 3 + depth - 1)]
        connections += [(3 + depth - 1, 2, 1.0)]
        genome = make_genome(connections)

        value = 1.0
        for _ in range(depth + 1):
            value = sigmoid(value)
        assert simulate(genome, [1.0, 0.0]) == [pytest.approx(value)]

    def test_cycle_at_end_of_deep_chain(self, make_genome):
        """A cycle far from the outputs is still detected."""
        depth       = 1500
        connections = [(0, 3, 1.0)]
        connections += [(node, node + 1, 1.0) for node in range(3, 3 + depth - 1)]
        connections += [(3 + depth - 1, 2, 1.0), (4, 3, 1.0)]
        genome = make_genome(connections)

        with pytest.raises(AssertionError, match="cycle"):
            simulate(genome, [1.0, 0.0])

    def test_repeatable(self, make_genome):
        """Evaluating twice gives the same result."""
        genome = make_genome([(0, 3, 1.0), (3, 2, -1.0), (1, 2, 0.3)])
        assert simulate(genome, [0.2, 0.9]) == simulate(genome, [0.2, 0.9])

    def test_wrong_number_of_inputs(self, make_genome):
        """The number of inputs must match the number of sensors."""
        genome = make_genome([(0, 2, 1.0)])
        with pytest.raises(ValueError):
            simulate(genome, [1.0])
        with pytest.raises(ValueError):
            simulate(genome, [1.0, 2.0, 3.0])

    def test_cycle_is_a_bug(self, make_genome):
        """A cyclic genome trips an assertion."""
        genome = make_genome([(0, 3, 1.0), (3, 4, 1.0), (4, 3, 1.0), (4, 2, 1.0)])
        with pytest.raises(AssertionError):
            simulate(genome, [1.0, 1.0])


# ============================================================================
# Test: LabeledNetwork
# ============================================================================

class TestLabeledNetwork:
    """Test evaluation through caller-defined labels."""

    def test_labels(self, make_genome):
        """Inputs are picked by label, outputs returned by label."""
        genome  = make_genome([(0, 2, 1.0), (1, 2, -2.0)])
        network = LabeledNetwork(genome, sensors=['x', 'y'], outputs=['out'])
        result  = network.simulate({'y': 0.5, 'x': 2.0})
        assert result == {'out': pytest.approx(sigmoid(2.0 - 1.0))}

    def test_matches_positional(self, make_genome):
        """Labeled evaluation agrees with positional evaluation."""
        genome  = make_genome([(0, 3, 1.0), (3, 2, -1.0), (1, 2, 0.3)])
        network = LabeledNetwork(genome, sensors=[('s', 0), ('s', 1)], outputs=[7])
        assert network.simulate({('s', 0): 0.4, ('s', 1): 0.1})[7] == simulate(genome, [0.4, 0.1])[0]

    def test_extra_labels_ignored(self, make_genome):
        """Inputs not corresponding to a sensor are ignored."""
        genome  = make_genome([(0, 2, 1.0)])
        network = LabeledNetwork(genome, sensors=['x', 'y'], outputs=['out'])
        assert network.simulate({'x': 1.0, 'y': 0.0, 'z': 9.0}) == {'out': pytest.approx(sigmoid(1.0))}

    def test_missing_label(self, make_genome):
        """A missing sensor label raises KeyError."""
        genome  = make_genome([(0, 2, 1.0)])
        network = LabeledNetwork(genome, sensors=['x', 'y'], outputs=['out'])
        with pytest.raises(KeyError):
            network.simulate({'x': 1.0})

    def test_label_count_mismatch(self, make_genome):
        """The number of labels must match the genome."""
        genome = make_genome()
        with pytest.raises(ValueError):
            LabeledNetwork(genome, sensors=['x'], outputs=['out'])
        with pytest.raises(ValueError):
            LabeledNetwork(genome, sensors=['x', 'y'], outputs=['a', 'b'])
