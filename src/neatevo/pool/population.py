"""
NEAT Population Module

This module implements the Population class: the working set of genomes
evolved by the trainer, stored as an indexed arena and guarded by a single
readers-writer lock.

Classes:
    Population: Container of the genomes of the current generation
"""

import numpy as np
from loguru import logger

from neatevo.run.config                   import Config
from neatevo.genotype.genome              import Genome
from neatevo.genotype.innovation_registry import InnovationRegistry
from neatevo.pool.rwlock                  import RWLock

class Population:
    """
    A population of evolving genomes in the NEAT algorithm.

    The genomes are kept in a plain list (the arena); species refer to genomes by
    ID and genomes refer to their species by ID, so there are no owning cycles.

    Readers (fitness evaluation, distance calculations) take 'lock.read()';
    structural changes (culling, repopulation, mutation) take 'lock.write()'.

    Public Attributes:
        genomes: List of all genomes in the current generation
        lock:    Readers-writer lock guarding 'genomes'

    Public Methods:
        populate(rng):          Create the initial generation
        get_genome(genome_id):  Look up a genome by ID
        get_fittest_genome():   Return the genome with highest raw fitness
    """

    def __init__(self, config: Config, registry: InnovationRegistry):
        """
        Parameters:
            config:   Stores configuration parameters
            registry: Hands out genome IDs and innovation numbers
        """
        self._config   = config
        self._registry = registry
        self.genomes: list[Genome] = []
        self.lock = RWLock()

    def populate(self, rng: np.random.Generator) -> None:
        """
        Create the initial generation.

        Step 1: create 'population_size' identical genomes, each with a network
        consisting only of unconnected sensor and output nodes.
        Step 2: add connections to each genome, according to the initial connection policy.
        """
        genomes = [Genome(self._config, self._registry) for _ in range(self._config.population_size)]

        policy = self._config.initial_cxn_policy
        if policy == "none":
            pass  # already unconnected
        elif policy == "one-input":
            self._connect_one_input(genomes, rng)
        elif policy == "partial":
            self._connect_partial(genomes, rng)
        elif policy == "full":
            self._connect_full(genomes, rng)
        else:
            raise RuntimeError("bad initial connection policy")

        with self.lock.write():
            self.genomes = genomes

        logger.info("[Population] Created {} genomes ({} inputs, {} outputs, '{}' connections)",
                    len(genomes), self._config.num_inputs, self._config.num_outputs, policy)

    def _connect_one_input(self, genomes: list[Genome], rng: np.random.Generator) -> None:
        """
        For each network, connect one random sensor node to all output nodes.
        """
        if self._config.num_inputs == 0:
            return

        for genome in genomes:
            sensor = int(rng.integers(genome.num_inputs))
            for output in genome.output_nodes:
                genome.add_gene(sensor, output, float(rng.uniform(-1.0, 1.0)), self._registry)

    def _connect_partial(self, genomes: list[Genome], rng: np.random.Generator) -> None:
        """
        For each network, connect a fraction of all possible sensor-output pairs.
        The connections are chosen at random.
        """
        for genome in genomes:
            all_pairs = [(sensor, output) for sensor in genome.sensor_nodes for output in genome.output_nodes]
            num_conns = int(len(all_pairs) * self._config.initial_cxn_fraction)

            # Keep the original pair order, so the genes are inserted in a predictable order
            for index in sorted(rng.choice(len(all_pairs), size=num_conns, replace=False)):
                sensor, output = all_pairs[index]
                genome.add_gene(sensor, output, float(rng.uniform(-1.0, 1.0)), self._registry)

    def _connect_full(self, genomes: list[Genome], rng: np.random.Generator) -> None:
        """
        For each network, connect all sensor nodes to all output nodes.
        """
        for genome in genomes:
            for sensor in genome.sensor_nodes:
                for output in genome.output_nodes:
                    genome.add_gene(sensor, output, float(rng.uniform(-1.0, 1.0)), self._registry)

    def get_genome(self, genome_id: int) -> Genome:
        """
        Raises:
            KeyError: If no genome in the population has this ID
        """
        with self.lock.read():
            for genome in self.genomes:
                if genome.id == genome_id:
                    return genome
        raise KeyError(f"No genome with ID {genome_id} in the population")

    def get_fittest_genome(self) -> Genome | None:
        """
        Find and return the genome with the highest raw fitness in the population.

        Returns:
            The genome with the highest fitness value, or None if the population
            is empty or the fitness of its genomes has not been calculated yet
        """
        with self.lock.read():
            if not self.genomes or any(genome.fitness is None for genome in self.genomes):
                return None
            return max(self.genomes, key=lambda genome: genome.fitness)

    def __len__(self):
        with self.lock.read():
            return len(self.genomes)

    def __str__(self):
        with self.lock.read():
            return '\n'.join(str(genome) for genome in self.genomes)
