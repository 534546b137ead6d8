"""
NEAT Network Visualization Module

Read-only graph projection of a genome, meant for external graph rendering
tools when debugging. Nothing in the evolutionary algorithm depends on it.

Functions:
    sign_str(value):    Format a number with an explicit sign
    to_digraph(genome): Build a graphviz.Digraph describing the genome's network
    to_dot(genome):     Return the DOT source describing the genome's network
"""

import graphviz  # type: ignore
from typing import TYPE_CHECKING

from neatevo.genotype.gene import NodeType
if TYPE_CHECKING:
    from neatevo.genotype import Genome

# Define node colors and shapes
_NODE_ATTRS = {
    NodeType.SENSOR: {'fillcolor': 'lightgrey', 'shape': 'box'},
    NodeType.HIDDEN: {'fillcolor': 'lightblue', 'shape': 'circle'},
    NodeType.OUTPUT: {'fillcolor': 'white',     'shape': 'doublecircle'},
}

def sign_str(value: float) -> str:
    """Format 'value' with an explicit sign: '+0.50', '-1.25'."""
    return f"{value:+.2f}"

def to_digraph(genome: 'Genome') -> graphviz.Digraph:
    """
    Build a graphviz.Digraph describing the network encoded by a genome.

    Sensor, hidden and output nodes are drawn with distinct shapes and colors.
    Every gene becomes an edge labeled with its signed weight; enabled genes
    are drawn solid black, disabled ones dashed light gray.

    Parameters:
        genome: the genome to describe

    Returns:
        graphviz.Digraph object representing the network
    """
    dot = graphviz.Digraph(name=f"genome_{genome.id}")
    dot.attr(rankdir='LR')  # Left to right layout

    with dot.subgraph(name='cluster_sensors') as cluster:
        cluster.attr(rank='source', label='Sensors', style='invisible')
        for node in genome.sensor_nodes:
            cluster.node(str(node), label=f"S{node}", style='filled', **_NODE_ATTRS[NodeType.SENSOR])

    for node in genome.hidden_nodes:
        dot.node(str(node), label=f"H{node}", style='filled', **_NODE_ATTRS[NodeType.HIDDEN])

    with dot.subgraph(name='cluster_outputs') as cluster:
        cluster.attr(rank='sink', label='Outputs', style='invisible')
        for node in genome.output_nodes:
            cluster.node(str(node), label=f"O{node}", style='filled', **_NODE_ATTRS[NodeType.OUTPUT])

    for gene in genome.genes:
        if gene.enabled:
            edge_attrs = {'color': 'black', 'style': 'solid'}
        else:
            edge_attrs = {'color': 'lightgray', 'style': 'dashed'}
        dot.edge(str(gene.node_in), str(gene.node_out), label=sign_str(gene.weight), **edge_attrs)

    return dot

def to_dot(genome: 'Genome') -> str:
    """Return the DOT source describing the network encoded by a genome."""
    return to_digraph(genome).source
