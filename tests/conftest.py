"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from neatevo.run.config                   import Config
from neatevo.genotype.genome              import Genome
from neatevo.genotype.innovation_registry import InnovationRegistry


@pytest.fixture
def config():
    """Configuration with 2 inputs and 1 output, all other parameters at their defaults."""
    return Config(num_inputs=2, num_outputs=1)


@pytest.fixture
def registry():
    """A fresh innovation registry."""
    return InnovationRegistry()


@pytest.fixture
def rng():
    """A seeded random generator, so that tests are reproducible."""
    return np.random.default_rng(42)


@pytest.fixture
def make_genome(config, registry):
    """
    Factory building a genome from a list of connections.

    Each connection is a tuple (node_in, node_out, weight) or (node_in, node_out, weight, enabled).
    Hidden nodes are created as needed, so that every referenced node index exists.
    """
    def _make(connections=(), genome_config=None):
        genome_config = genome_config if genome_config is not None else config
        genome = Genome(genome_config, registry)
        for connection in connections:
            node_in, node_out, weight = connection[:3]
            enabled = connection[3] if len(connection) > 3 else True
            genome.node_count = max(genome.node_count, node_in + 1, node_out + 1)
            genome.add_gene(node_in, node_out, weight, registry, enabled)
        return genome

    return _make


def has_cycle(genome):
    """
    Independent cycle detector (three-color DFS) over the enabled genes,
    used to cross-check the acyclicity of evolved genomes.
    """
    adjacency = {}
    for gene in genome.genes:
        if gene.enabled:
            adjacency.setdefault(gene.node_in, []).append(gene.node_out)

    WHITE, GRAY, BLACK = 0, 1, 2
    color = {node: WHITE for node in range(genome.node_count)}

    def visit(node):
        color[node] = GRAY
        for neighbor in adjacency.get(node, []):
            if color[neighbor] == GRAY:
                return True
            if color[neighbor] == WHITE and visit(neighbor):
                return True
        color[node] = BLACK
        return False

    return any(color[node] == WHITE and visit(node) for node in range(genome.node_count))


@pytest.fixture
def cycle_detector():
    """Provide the independent cycle detector to tests."""
    return has_cycle
