"""
NEAT Species Module

This module implements the Species class for the NEAT algorithm.
A species represents a cluster of genetically similar genomes that
share their fitness, so that novel structures are not immediately
out-competed by larger, more mature species.

Classes:
    Species: A single species with its representative and fitness tracking
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from neatevo.genotype import Genome

class Species:
    """
    A species representing a cluster of genetically similar genomes in NEAT.

    Membership is recomputed every generation: each genome joins the first
    species whose representative lies within the compatibility threshold. The
    representative is the first genome that joined (or founded) the species
    during the most recent speciation pass. Genomes are never structurally
    modified in place, so the representative's genes stay valid after it
    leaves the population.

    Public Attributes:
        id:             Unique species identifier
        representative: Genome used for distance calculations during speciation
        members:        IDs of the genomes assigned in the latest speciation pass
        created:        Generation in which the species was created
        fitness:        Average raw fitness of the members (None until calculated)
        stagnant:       Number of generations the fitness has not improved

    Public Methods:
        distance_to(genome):     Calculate genetic distance to a genome
        update_fitness(fitness): Record the species fitness for the current generation
    """

    def __init__(self, species_id: int, representative: 'Genome', generation: int):
        """
        Parameters:
            species_id:     unique species identifier
            representative: the genome that founded this species
            generation:     the generation in which this species is created
        """
        self.id            : int            = species_id
        self.representative: 'Genome'       = representative
        self.members       : list[int]      = []
        self.created       : int            = generation
        self.fitness       : float | None   = None
        self.stagnant      : int            = 0

    def distance_to(self, genome: 'Genome') -> float:
        """
        Calculate the genetic distance between this species and a given genome.
        Uses the species representative for comparison.
        """
        return self.representative.distance(genome)

    def update_fitness(self, fitness: float) -> None:
        """
        Record the species fitness for the current generation.
        The stagnation counter is reset when the fitness improves, and increases otherwise.
        """
        if self.fitness is not None and fitness <= self.fitness:
            self.stagnant += 1
        else:
            self.stagnant = 0
        self.fitness = fitness

    def __len__(self):
        return len(self.members)

    def __repr__(self):
        return (f"Species(id={self.id}, members={len(self.members)}, created={self.created}, "
                f"fitness={self.fitness}, stagnant={self.stagnant})")
