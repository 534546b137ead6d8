"""
NEAT Genotype Package

This package implements the genotype representation for the NEAT (NeuroEvolution of
Augmenting Topologies) algorithm. It provides classes for encoding neural network
structures and parameters at the genetic level.

A genome is a number of nodes (identified by index) plus a list of genes, each gene
encoding a weighted connection tagged with an innovation number.

Modules:
    gene:                NodeType enumeration, node classification and Gene class
    genome:              Genome class (including mutation, crossover and distance)
    innovation_registry: InnovationRegistry class

Exported Classes:
    NodeType:           Enumeration for node types (SENSOR, HIDDEN, OUTPUT)
    Gene:               Gene encoding a weighted connection between nodes
    Genome:             Complete genome representing a neural network
    InnovationRegistry: Run-scoped tracker for innovation numbers, species and genome IDs
"""

from neatevo.genotype.gene                import Gene, NodeType, node_type
from neatevo.genotype.genome              import Genome
from neatevo.genotype.innovation_registry import InnovationRegistry

__all__ = ['Gene',
           'Genome',
           'InnovationRegistry',
           'NodeType',
           'node_type']
