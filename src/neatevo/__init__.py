"""
NEAT (NeuroEvolution of Augmenting Topologies) - A Python implementation.

This package evolves populations of variable-topology feed-forward neural networks
toward a caller-supplied fitness objective, using mutation, innovation-tracked
crossover and fitness sharing among species.

Main components:
- genotype:  Genetic encoding (genomes, genes, innovation registry)
- phenotype: Network evaluation and debug visualization
- pool:      Population and speciation management
- run:       Configuration and the generational training loop

Example:
    >>> from neatevo import Config, Trainer
    >>> config  = Config(num_inputs=2, num_outputs=1)
    >>> trainer = Trainer(config, seed=42)
    >>> def fitness(index, genome):
    ...     return 1.0 - abs(genome.simulate([1.0, 0.0])[0] - 1.0)
    >>> best = trainer.run(fitness, max_generations=10)
"""

__version__ = "0.1.0"

# Import main classes for convenient access
from neatevo.run.config                   import Config
from neatevo.run.trainer                  import Phase, Trainer
from neatevo.genotype.gene                import Gene, NodeType
from neatevo.genotype.genome              import Genome
from neatevo.genotype.innovation_registry import InnovationRegistry
from neatevo.phenotype.network            import LabeledNetwork
from neatevo.pool.population              import Population
from neatevo.pool.species                 import Species

__all__ = [
    "Config",
    "Phase",
    "Trainer",
    "Gene",
    "NodeType",
    "Genome",
    "InnovationRegistry",
    "LabeledNetwork",
    "Population",
    "Species",
]
