"""
NEAT Network Module

This module evaluates the network encoded by a genome. The evaluation is
pull-based: the value of each output node is computed by pulling the
values of the nodes feeding into it, walking the network depth-first with
an explicit stack.

    value(sensor) = supplied input (not squashed)
    value(node)   = sigmoid( sum of value(g.node_in) * g.weight over the enabled genes g ending at node )

Node values are memoized for the duration of one evaluation, so shared
sub-networks are only computed once. A node without incoming enabled
connections has weighted input 0 and evaluates to sigmoid(0) = 0.5.

Functions:
    sigmoid(x):               The logistic squash function
    simulate(genome, inputs): Evaluate a genome on a vector of sensor values

Classes:
    LabeledNetwork: Evaluate a genome on sensor values keyed by caller-defined labels
"""

import math
from collections import defaultdict
from typing      import Hashable, Mapping, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from neatevo.genotype import Genome

def sigmoid(x: float) -> float:
    """Return the S-Curve activation of x: 1 / (1 + e^-x)."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))

    # Rearranged to prevent overflow when calculating exp for large negative x
    z = math.exp(x)
    return z / (1.0 + z)

def simulate(genome: 'Genome', inputs: Sequence[float]) -> list[float]:
    """
    Evaluate the network encoded by a genome.

    The enabled connections of the genome must form a DAG; this is guaranteed
    by the mutation and crossover operators. Reaching a node again while its
    own value is still being computed means the graph is cyclic, which is an
    algorithm bug and fails with an AssertionError.

    Parameters:
        genome: the genome to evaluate
        inputs: one value per sensor node, in sensor order

    Returns:
        one value per output node, in output order

    Raises:
        ValueError: If the number of inputs does not match the number of sensor nodes
    """
    if len(inputs) != genome.num_inputs:
        raise ValueError(f"Expected {genome.num_inputs} inputs, got {len(inputs)}")
    assert genome.node_count >= genome.num_inputs + genome.num_outputs, \
        f"genome {genome.id} is missing sensor/output nodes"

    # incoming[node] = list of (source node, weight) for the enabled connections ending at 'node'
    incoming = defaultdict(list)
    for gene in genome.genes:
        if gene.enabled:
            incoming[gene.node_out].append((gene.node_in, gene.weight))

    values     = {node: float(value) for node, value in zip(genome.sensor_nodes, inputs)}
    in_process = set()

    # Depth-first walk with an explicit stack. A node is expanded when first seen
    # and valued when seen again, after all of its sources.
    for output in genome.output_nodes:
        stack = [output]
        while stack:
            node = stack[-1]
            if node in values:
                stack.pop()
            elif node in in_process:
                weighted_input = sum(values[source] * weight for source, weight in incoming[node])
                values[node] = sigmoid(weighted_input)
                in_process.discard(node)
                stack.pop()
            else:
                in_process.add(node)
                for source, _ in incoming[node]:
                    if source not in values:
                        assert source not in in_process, f"cycle through node {source} in genome {genome.id}"
                        stack.append(source)

    return [values[node] for node in genome.output_nodes]

class LabeledNetwork:
    """
    Evaluates a genome on sensor values keyed by caller-defined labels.

    The labels are only used at the boundary: sensor labels are mapped to sensor
    node indices (in the order given), and the output values are returned keyed
    by the output labels (in output node order). Any hashable type can be used
    as a label.

    Public Methods:
        simulate(inputs): Evaluate the genome on a label => value mapping
    """

    def __init__(self, genome: 'Genome', sensors: Sequence[Hashable], outputs: Sequence[Hashable]):
        """
        Parameters:
            genome:  the genome to evaluate
            sensors: one label per sensor node, in sensor order
            outputs: one label per output node, in output order

        Raises:
            ValueError: If the number of labels does not match the genome's sensor/output nodes
        """
        if len(sensors) != genome.num_inputs:
            raise ValueError(f"Expected {genome.num_inputs} sensor labels, got {len(sensors)}")
        if len(outputs) != genome.num_outputs:
            raise ValueError(f"Expected {genome.num_outputs} output labels, got {len(outputs)}")

        self._genome  = genome
        self._sensors = list(sensors)
        self._outputs = list(outputs)

    def simulate(self, inputs: Mapping[Hashable, float]) -> dict[Hashable, float]:
        """
        Parameters:
            inputs: sensor label => value; every sensor label must be present

        Returns:
            output label => value

        Raises:
            KeyError: If a sensor label has no corresponding input
        """
        values = [inputs[label] for label in self._sensors]
        return dict(zip(self._outputs, simulate(self._genome, values)))
