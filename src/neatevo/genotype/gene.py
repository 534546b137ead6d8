"""
NEAT Gene Module

This module implements the Gene class and the node classification helpers
for the NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Nodes are not materialized as objects: a node is identified by its index,
and its type follows from where the index falls.

Classes:
    NodeType: Enumeration for node types (SENSOR, HIDDEN, OUTPUT)
    Gene:     Gene encoding a weighted, directed connection between two nodes

Functions:
    node_type(index, num_inputs, num_outputs): Classify a node index
"""

from enum import Enum

class NodeType(Enum):
    """
    Nodes come in three types: sensor, hidden, output.
    """
    SENSOR = "S"
    HIDDEN = "H"
    OUTPUT = "O"

def node_type(index: int, num_inputs: int, num_outputs: int) -> NodeType:
    """
    Classify a node index.

    Node numbering convention:
        - Sensor nodes: [0, num_inputs)
        - Output nodes: [num_inputs, num_inputs + num_outputs)
        - Hidden nodes: [num_inputs + num_outputs, ...)
    """
    assert index >= 0, f"negative node index {index}"
    if index < num_inputs:
        return NodeType.SENSOR
    if index < num_inputs + num_outputs:
        return NodeType.OUTPUT
    return NodeType.HIDDEN

class Gene:
    """
    A gene describing a weighted connection between two nodes in a Neural Network.

    Each gene represents a directed edge in the network graph. Genes are identified
    by their innovation number, a historical marker shared by every gene descending
    from the same structural mutation, which lets genes of unrelated genomes be
    aligned during crossover and distance calculation.

    Genes can be enabled or disabled; a disabled gene keeps its structural
    information but does not take part in network evaluation.

    Public Attributes:
        node_in:    Index of the source node
        node_out:   Index of the destination node
        weight:     Weight of the connection
        enabled:    Whether this connection is active in the network
        innovation: Innovation number identifying this connection
    """

    __slots__ = ('node_in', 'node_out', 'weight', 'enabled', 'innovation')

    def __init__(self,
                 node_in   : int,
                 node_out  : int,
                 weight    : float,
                 innovation: int,
                 enabled   : bool = True):
        self.node_in   : int   = node_in
        self.node_out  : int   = node_out
        self.weight    : float = weight
        self.enabled   : bool  = enabled
        self.innovation: int   = innovation

    def copy(self) -> 'Gene':
        return Gene(self.node_in, self.node_out, self.weight, self.innovation, self.enabled)

    def __eq__(self, other):
        if not isinstance(other, Gene):
            return NotImplemented
        return (self.node_in    == other.node_in  and
                self.node_out   == other.node_out and
                self.weight     == other.weight   and
                self.enabled    == other.enabled  and
                self.innovation == other.innovation)

    __hash__ = None

    def __repr__(self):
        return (f"Gene(node_in={self.node_in:03d}, node_out={self.node_out:03d}, "
                f"weight={self.weight:+.6f}, enabled={self.enabled}, innovation={self.innovation:03d})")

    def __str__(self):
        s  = f"[{self.innovation:03d},{'E' if self.enabled else 'D'},"
        s += f"{self.node_in:02d}=>{self.node_out:02d},{self.weight:+.02f}]"
        return s
