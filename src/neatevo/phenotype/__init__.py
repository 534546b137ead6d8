"""
NEAT Phenotype Package

This package expresses genomes as executable neural networks.

Modules:
    network:   Pull-based, memoized evaluation of a genome's network
    visualize: Read-only graph projection of a genome for debugging

Exported:
    simulate:       Evaluate a genome on a vector of sensor values
    sigmoid:        The squash function applied to hidden and output nodes
    LabeledNetwork: Evaluate a genome on sensor values keyed by labels
    to_digraph:     Build a graphviz.Digraph describing a genome
    to_dot:         DOT source describing a genome
"""

from neatevo.phenotype.network   import LabeledNetwork, sigmoid, simulate
from neatevo.phenotype.visualize import sign_str, to_digraph, to_dot

__all__ = ['LabeledNetwork',
           'sigmoid',
           'simulate',
           'sign_str',
           'to_digraph',
           'to_dot']
