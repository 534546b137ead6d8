"""
NEAT Innovation Registry Module

This module implements the InnovationRegistry class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    InnovationRegistry: Run-scoped generator of innovation numbers, species IDs and genome IDs
"""

import threading
from itertools import count

class InnovationRegistry:
    """
    Tracks structural changes across all genomes of one training run.

    Ensures that the same structural change (a connection between the same
    ordered pair of nodes) receives the same innovation number, no matter in
    which genome or generation it occurs. Genes descending from the same
    historical mutation therefore share an innovation number, which is what
    crossover and the genetic distance use to align genes.

    Also hands out species IDs and genome IDs from two independent counters.

    One registry lives for the duration of one training run and is passed
    explicitly to every operation that needs it; independent runs use
    independent registries. All methods are safe to call from multiple threads.

    Public Properties:
        edge_count: Number of distinct innovation numbers issued so far

    Public Methods:
        new_edge(node_in, node_out): Get the innovation number for a connection
        new_specie():                Get a new species ID
        new_genome():                Get a new genome ID
    """

    def __init__(self):
        self._lock = threading.Lock()

        # For each connection ever created, map its endpoints to its innovation number
        self._innovation_numbers: dict[tuple[int, int], int] = {}   # (node_in, node_out) -> innovation number

        self._next_innovation_number = count(0)
        self._next_specie_id         = count(0)
        self._next_genome_id         = count(0)

    @property
    def edge_count(self) -> int:
        with self._lock:
            return len(self._innovation_numbers)

    def new_edge(self, node_in: int, node_out: int) -> int:
        """
        Get innovation number for a connection, identified by its endpoints.
        Returns existing innovation number if this connection was created
        before, otherwise assigns a new innovation number.

        The direction matters: (a, b) and (b, a) are different connections.

        Parameters:
            node_in:  node index for the 'from' end of the connection
            node_out: node index for the 'to'   end of the connection

        Returns:
            connection ID (a.k.a. innovation number)
        """
        key = (node_in, node_out)
        with self._lock:
            innovation = self._innovation_numbers.get(key)
            if innovation is None:
                innovation = next(self._next_innovation_number)
                self._innovation_numbers[key] = innovation
            return innovation

    def new_specie(self) -> int:
        with self._lock:
            return next(self._next_specie_id)

    def new_genome(self) -> int:
        with self._lock:
            return next(self._next_genome_id)
