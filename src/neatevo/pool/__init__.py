"""
NEAT Pool Package

This package manages the population of genomes and its division into species.

Modules:
    population:      Population class (genome arena and its lock)
    species:         Species class
    species_manager: SpeciesManager class (speciation across generations)
    rwlock:          Readers-writer lock guarding the population

Exported Classes:
    Population:     Container of the genomes of the current generation
    Species:        A cluster of genetically similar genomes
    SpeciesManager: Assigns genomes to species every generation
    RWLock:         Readers-writer lock
"""

from neatevo.pool.population      import Population
from neatevo.pool.rwlock          import RWLock
from neatevo.pool.species         import Species
from neatevo.pool.species_manager import SpeciesManager

__all__ = ['Population',
           'RWLock',
           'Species',
           'SpeciesManager']
