"""
NEAT Trainer Module

This module implements the Trainer class, which drives the generational loop
of the NEAT algorithm over a population of genomes.

Each generation runs through a fixed sequence of phases, and every phase
completes before the next one starts:

    SPECIATE -> SCORE -> NORMALIZE -> CULL -> REPOPULATE -> MUTATE

Classes:
    Phase:   Enumeration of the phases of a generation
    Trainer: Top-level evolutionary coordinator
"""

import numpy as np
from collections import Counter, defaultdict
from enum        import Enum
from joblib      import Parallel, delayed
from loguru      import logger
from typing      import Callable

from neatevo.run.config                   import Config
from neatevo.genotype.genome              import Genome
from neatevo.genotype.innovation_registry import InnovationRegistry
from neatevo.pool.population              import Population
from neatevo.pool.species                 import Species
from neatevo.pool.species_manager         import SpeciesManager

# fitness(genome_index, genome) => fitness; higher is better
FitnessFunction = Callable[[int, Genome], float]

class Phase(Enum):
    """
    The phases of the trainer's state machine.
    IDLE is the initial state, before the first generation runs.
    """
    IDLE       = "idle"
    SPECIATE   = "speciate"
    SCORE      = "score"
    NORMALIZE  = "normalize"
    CULL       = "cull"
    REPOPULATE = "repopulate"
    MUTATE     = "mutate"

# The phase that must follow each phase
_NEXT_PHASE = {
    Phase.IDLE      : Phase.SPECIATE,
    Phase.SPECIATE  : Phase.SCORE,
    Phase.SCORE     : Phase.NORMALIZE,
    Phase.NORMALIZE : Phase.CULL,
    Phase.CULL      : Phase.REPOPULATE,
    Phase.REPOPULATE: Phase.MUTATE,
    Phase.MUTATE    : Phase.SPECIATE,
}

# Phases which leave the structure of the population untouched
_READ_ONLY_PHASES = (Phase.SPECIATE, Phase.SCORE, Phase.NORMALIZE)

class Trainer:
    """
    Drives the evolution of a population of genomes toward a fitness objective.

    The trainer is synchronous: nothing runs in the background, and each call
    to 'gen()' runs exactly one complete generation:

    Step 1: Speciate   - assign every genome to a species
    Step 2: Score      - evaluate the fitness function once per genome
    Step 3: Normalize  - divide each fitness by the size of the genome's species
    Step 4: Cull       - remove the worst 'population_kill_percent' fraction
    Step 5: Repopulate - refill the population through crossover
    Step 6: Mutate     - replace every genome by a mutated copy

    All randomness comes from one numpy Generator, seeded with 'seed'.

    The innovation registry is only used outside the population's write lock:
    offspring and mutants are built from a snapshot taken under the read lock,
    and swapped into the population afterwards.

    Public Attributes:
        generation:   Number of completed generations
        phase:        Current phase of the state machine
        best_genome:  Genome with the highest fitness evaluated so far (None before the first evaluation)
        best_fitness: Fitness of 'best_genome'
        mean_fitness: Average fitness of the most recently evaluated generation

    Public Properties:
        config, registry, population, genomes, species

    Public Methods:
        populate():                            Create the initial population
        gen(fitness, num_jobs):                Run one generation
        run(fitness, max_generations, num_jobs): Run generations until a termination condition is met
    """

    def __init__(self, config: Config, registry: InnovationRegistry | None = None, seed: int | None = None):
        """
        Parameters:
            config:   Configuration parameters
            registry: Innovation registry for this run (a new one is created if None)
            seed:     Seed of the random generator used by every stochastic operation
        """
        self._config          = config
        self._registry        = registry if registry is not None else InnovationRegistry()
        self._rng             = np.random.default_rng(seed)
        self._population      = Population(config, self._registry)
        self._species_manager = SpeciesManager(config, self._registry)

        self.generation  : int            = 0
        self.phase       : Phase          = Phase.IDLE
        self.best_genome : Genome | None  = None
        self.best_fitness: float  | None  = None
        self.mean_fitness: float  | None  = None
        self._populated  : bool           = False

    @property
    def config(self) -> Config:
        return self._config

    @property
    def registry(self) -> InnovationRegistry:
        return self._registry

    @property
    def population(self) -> Population:
        return self._population

    @property
    def genomes(self) -> list[Genome]:
        with self._population.lock.read():
            return list(self._population.genomes)

    @property
    def species(self) -> list[Species]:
        return list(self._species_manager.species.values())

    def populate(self) -> None:
        """
        Create the initial population. Only allowed once, before the first generation.
        """
        assert self.phase == Phase.IDLE and not self._populated, "population already created"
        self._population.populate(self._rng)
        self._populated = True

    def gen(self, fitness: FitnessFunction, num_jobs: int = 1) -> None:
        """
        Run one complete generation.

        Creates the initial population first, if needed. If the fitness function
        raises, the population is left as it was and the exception propagates;
        the generation can then be run again.

        Parameters:
            fitness:  Fitness function, called once per genome as fitness(genome_index, genome)
            num_jobs: Number of threads evaluating the fitness function
                       1 = serial (no parallelization)
                      -1 = use all available CPU cores
                      >1 = use specified number of threads
        """
        if not self._populated:
            self.populate()

        start_phase = self.phase
        try:
            self._enter(Phase.SPECIATE)
            self._species_manager.categorize(self._population, self.generation, self._rng)

            self._enter(Phase.SCORE)
            self._score(fitness, num_jobs)

            self._enter(Phase.NORMALIZE)
            self._normalize()

            self._enter(Phase.CULL)
            self._cull()

            self._enter(Phase.REPOPULATE)
            self._repopulate()

            self._enter(Phase.MUTATE)
            self._mutate()

        except Exception:
            if self.phase in _READ_ONLY_PHASES:
                self.phase = start_phase
            raise

        with self._population.lock.read():
            assert len(self._population.genomes) == self._config.population_size

        logger.info("[Trainer] Generation {}: species={} best={:.4f} mean={:.4f}",
                    self.generation, len(self._species_manager.species),
                    self.best_fitness, self.mean_fitness)
        self.generation += 1

    def run(self, fitness: FitnessFunction, max_generations: int | None = None, num_jobs: int = 1) -> Genome | None:
        """
        Run generations until a termination condition is met.

        The run stops after 'max_generations' generations (by default
        'config.max_number_generations'), or as soon as the best fitness reaches
        'config.fitness_threshold' (if set).

        Returns:
            The genome with the highest fitness evaluated during the run
        """
        if max_generations is None:
            max_generations = self._config.max_number_generations
        threshold = self._config.fitness_threshold

        for _ in range(max_generations):
            self.gen(fitness, num_jobs)
            if threshold is not None and self.best_fitness >= threshold:
                logger.info("[Trainer] Fitness threshold {} reached after {} generations",
                            threshold, self.generation)
                break

        return self.best_genome

    def _enter(self, phase: Phase) -> None:
        assert _NEXT_PHASE[self.phase] == phase, f"cannot enter phase {phase.name} after {self.phase.name}"
        self.phase = phase

    def _score(self, fitness: FitnessFunction, num_jobs: int) -> None:
        """
        Evaluate the fitness of every genome, then the fitness of every species.
        """
        with self._population.lock.read():
            genomes = list(self._population.genomes)
            if num_jobs == 1:
                scores = [fitness(index, genome) for index, genome in enumerate(genomes)]
            else:
                scores = Parallel(n_jobs=num_jobs, prefer="threads")(
                    delayed(fitness)(index, genome) for index, genome in enumerate(genomes))

        with self._population.lock.write():
            for genome, score in zip(genomes, scores):
                genome.fitness = float(score)

        self._species_manager.update_fitness(self._population)

        fittest = max(genomes, key=lambda genome: genome.fitness)
        if self.best_fitness is None or fittest.fitness > self.best_fitness:
            self.best_genome  = fittest
            self.best_fitness = fittest.fitness
        self.mean_fitness = sum(genome.fitness for genome in genomes) / len(genomes)

    def _normalize(self) -> None:
        """
        Explicit fitness sharing: divide each genome's fitness by the size of its species.
        """
        with self._population.lock.write():
            species_sizes = Counter(genome.species for genome in self._population.genomes)
            for genome in self._population.genomes:
                assert genome.species is not None, f"genome {genome.id} was not speciated"
                genome.shared_fitness = genome.fitness / species_sizes[genome.species]

    def _cull(self) -> None:
        """
        Remove the worst 'population_kill_percent' fraction of the population,
        ranked by shared fitness. At least one genome always survives.
        """
        with self._population.lock.write():
            genomes    = self._population.genomes
            num_killed = min(int(len(genomes) * self._config.population_kill_percent), len(genomes) - 1)

            ranked = sorted(genomes, key=lambda genome: genome.shared_fitness)
            killed = {genome.id for genome in ranked[:num_killed]}
            self._population.genomes = [genome for genome in genomes if genome.id not in killed]

        logger.debug("[Trainer] Culled {} genomes", num_killed)

    def _repopulate(self) -> None:
        """
        Refill the population up to 'population_size' through crossover.

        Parents are chosen with probability proportional to their shared fitness.
        Each parent mates with another genome of its own species when there is one,
        otherwise with a random genome of the population.
        """
        with self._population.lock.read():
            survivors = list(self._population.genomes)

        by_species = defaultdict(list)
        for genome in survivors:
            by_species[genome.species].append(genome)
        probabilities = self._selection_probabilities(survivors)

        offspring = []
        while len(survivors) + len(offspring) < self._config.population_size:
            parent = survivors[self._rng.choice(len(survivors), p=probabilities)]

            mates = [genome for genome in by_species[parent.species] if genome is not parent]
            if not mates:
                mates = survivors
            mate = mates[int(self._rng.integers(len(mates)))]

            offspring.append(self._breed(parent, mate))

        with self._population.lock.write():
            self._population.genomes = survivors + offspring

    def _selection_probabilities(self, genomes: list[Genome]) -> np.ndarray:
        """
        Probability of each genome being selected as a parent, proportional
        to its shared fitness shifted so that the least fit genome scores zero.
        Uniform if all genomes are equally fit.
        """
        shared = np.array([genome.shared_fitness for genome in genomes], dtype=np.float64)
        shifted = shared - shared.min()
        total = shifted.sum()
        if total <= 0:
            return np.full(len(genomes), 1.0 / len(genomes))
        return shifted / total

    def _breed(self, parent: Genome, mate: Genome) -> Genome:
        """
        Cross over two parents, rejecting offspring whose enabled connections contain
        a cycle. After 'crossover_tries' rejections, fall back to a clone of 'parent'.
        """
        for _ in range(self._config.crossover_tries):
            child = parent.crossover(mate, (parent.fitness, mate.fitness), self._registry, self._rng)
            if child.is_acyclic():
                return child

        logger.debug("[Trainer] Cyclic offspring of {} and {}, cloning {}", parent.id, mate.id, parent.id)
        return parent.clone(self._registry)

    def _mutate(self) -> None:
        """
        Replace every genome of the population by a mutated copy.
        """
        with self._population.lock.read():
            genomes = list(self._population.genomes)

        mutants = [genome.mutate(self._registry, self._rng) for genome in genomes]

        with self._population.lock.write():
            self._population.genomes = mutants
