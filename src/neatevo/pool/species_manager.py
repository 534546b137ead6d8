"""
NEAT Species Manager Module

This module implements the SpeciesManager class for the NEAT algorithm.
The manager coordinates the speciation process and manages the lifecycle
of all species across generations.

Speciation in NEAT:
In traditional genetic algorithms, new structural innovations often have lower
initial fitness and are quickly eliminated. NEAT addresses this by organizing
the population into species - groups of genetically similar genomes whose
fitness is shared among their members. This allows novel structures time to
optimize before facing global competition.

How Speciation Works:
1. Visit the genomes of the population in random order
2. Assign each genome to the first species whose representative lies within
   the compatibility threshold
3. Create a new species for every genome that doesn't fit any existing species
4. Remove the species left without members

Classes:
    SpeciesManager: Manages all species and the speciation process
"""

from loguru import logger
from typing import TYPE_CHECKING

import numpy as np

from neatevo.run.config                   import Config
from neatevo.genotype.innovation_registry import InnovationRegistry
from neatevo.pool.species                 import Species
if TYPE_CHECKING:
    from neatevo.genotype import Genome
    from neatevo.pool.population import Population

class SpeciesManager:
    """
    Manages the collection of species and the speciation process across generations.

    Species outlive generations: at each speciation pass, every genome is compared
    against the representatives of the existing species (kept from the previous
    pass), and the first genome to join a species becomes its representative for
    the next pass.

    Public Attributes:
        species: Dictionary mapping species IDs to Species instances (in creation order)

    Public Methods:
        categorize(population, generation, rng): Assign every genome of the population to a species
        update_fitness(population):              Calculate and record every species' fitness
    """

    def __init__(self, config: Config, registry: InnovationRegistry):
        """
        Parameters:
            config:   Stores configuration parameters
            registry: Hands out species IDs
        """
        self.species  : dict[int, Species] = {}   # species ID => Species instance
        self._config   = config
        self._registry = registry

    def categorize(self, population: 'Population', generation: int, rng: np.random.Generator) -> None:
        """
        Assign all genomes in the population to species based on genetic similarity.

        The distance calculations only read the population and run under its read
        lock; the resulting species IDs are then written under the write lock.

        Parameters:
            population: the population to speciate
            generation: the current generation (recorded by newly created species)
            rng:        source of randomness (used for the visiting order)
        """
        with population.lock.read():
            genomes = list(population.genomes)
            assignments = self._assign(genomes, generation, rng)

        with population.lock.write():
            for genome in population.genomes:
                genome.species = assignments[genome.id]

    def _assign(self, genomes: list['Genome'], generation: int, rng: np.random.Generator) -> dict[int, int]:
        """
        Run one speciation pass.

        Returns:
            genome ID => species ID
        """
        for spec in self.species.values():
            spec.members = []

        assignments = {}
        for index in rng.permutation(len(genomes)):
            genome = genomes[index]

            for spec in self.species.values():
                if spec.distance_to(genome) < self._config.compatibility_threshold:

                    # The first genome joining the species in this pass represents it from now on
                    if not spec.members:
                        spec.representative = genome
                    break
            else:
                spec = Species(self._registry.new_specie(), genome, generation)
                self.species[spec.id] = spec
                logger.debug("[SpeciesManager] Created species {} (generation {})", spec.id, generation)

            spec.members.append(genome.id)
            assignments[genome.id] = spec.id

        # Remove extinct species
        for spec_id in [spec.id for spec in self.species.values() if not spec.members]:
            del self.species[spec_id]
            logger.debug("[SpeciesManager] Removed extinct species {}", spec_id)

        return assignments

    def update_fitness(self, population: 'Population') -> None:
        """
        Set the fitness of each species to the average raw fitness of its members.

        As a precondition, the population must have been speciated and the fitness
        of every genome evaluated.
        """
        with population.lock.read():
            fitness = {genome.id: genome.fitness for genome in population.genomes}

        for spec in self.species.values():
            spec.update_fitness(sum(fitness[genome_id] for genome_id in spec.members) / len(spec.members))
