"""
NEAT Genome Module

This module implements the Genome class for the NEAT
(NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    Genome: Complete genome representing a neural network structure
"""

import copy
import math
import numpy as np
from collections import defaultdict, deque

from neatevo.run.config                   import Config
from neatevo.genotype.gene                import Gene, NodeType, node_type
from neatevo.genotype.innovation_registry import InnovationRegistry

# While a genome has fewer genes than this, the add-node mutation
# prefers splitting one of its oldest connections.
SMALL_GENOME_SIZE = 15

# Below this number of genes the genetic distance is not normalized by genome size.
SMALL_GENOME_DISTANCE = 20

class Genome:
    """
    A NEAT genome representing a neural network as a list of genes.

    In the NEAT (NeuroEvolution of Augmenting Topologies) algorithm, a genome encodes
    the structure and parameters of a neural network at the genotype level. Nodes are
    not stored explicitly: the genome only records how many nodes it has, and each node
    is identified by its index. Each gene describes a weighted connection between two
    nodes and carries an innovation number, a historical marking used to align genes
    during crossover.

    A minimal genome contains only sensor and output nodes with no connections. Via
    mutation operations, genomes grow by adding nodes and connections, forming
    increasingly complex network topologies while maintaining a DAG structure over
    their enabled genes.

    Mutation and crossover never modify a genome in place: they return a new genome.

    Node numbering convention:
        - Sensor nodes: [0, num_inputs)
        - Output nodes: [num_inputs, num_inputs + num_outputs)
        - Hidden nodes: [num_inputs + num_outputs, node_count)

    Public Attributes:
        genes:          Genes in insertion order
        node_count:     Number of nodes (sensor + output + hidden)
        id:             Unique genome identifier
        species:        ID of the species this genome was assigned to (None until speciated)
        fitness:        Raw fitness (None until evaluated)
        shared_fitness: Fitness divided by the size of the genome's species (None until normalized)

    Public Properties:
        num_inputs, num_outputs: Number of sensor/output nodes
        sensor_nodes, output_nodes, hidden_nodes: Node index ranges
        enabled_genes: List of enabled genes

    Public Methods:
        add_gene(node_in, node_out, weight, registry): Append a new connection gene
        distance(other):                               Genetic distance to another genome
        crossover(other, fitness, registry, rng):      Create offspring with another genome
        mutate(registry, rng):                         Create a mutated copy of this genome
        clone(registry):                               Create a genetically identical copy with a new ID
        is_acyclic():                                  Whether the enabled genes form a DAG
        simulate(inputs):                              Evaluate the network encoded by this genome
    """

    def __init__(self, config: Config, registry: InnovationRegistry):
        """
        Initialize a minimal Genome.

        A minimal genome describes the smallest possible network: only sensor and
        output nodes (whose number never changes and is retrieved from the configuration)
        and no connections.

        Parameters:
            config:   Stores configuration parameters
            registry: Hands out the genome ID
        """
        self._config = config

        self.genes         : list[Gene]    = []
        self.node_count    : int           = config.num_inputs + config.num_outputs
        self.id            : int           = registry.new_genome()
        self.species       : int   | None  = None
        self.fitness       : float | None  = None
        self.shared_fitness: float | None  = None

    @property
    def config(self) -> Config:
        return self._config

    @property
    def num_inputs(self) -> int:
        return self._config.num_inputs

    @property
    def num_outputs(self) -> int:
        return self._config.num_outputs

    @property
    def sensor_nodes(self) -> range:
        return range(0, self.num_inputs)

    @property
    def output_nodes(self) -> range:
        return range(self.num_inputs, self.num_inputs + self.num_outputs)

    @property
    def hidden_nodes(self) -> range:
        return range(self.num_inputs + self.num_outputs, self.node_count)

    @property
    def enabled_genes(self) -> list[Gene]:
        return [gene for gene in self.genes if gene.enabled]

    def node_type(self, index: int) -> NodeType:
        assert index < self.node_count, f"node index {index} out of range for genome {self.id}"
        return node_type(index, self.num_inputs, self.num_outputs)

    def add_gene(self,
                 node_in : int,
                 node_out: int,
                 weight  : float,
                 registry: InnovationRegistry,
                 enabled : bool = True) -> Gene:
        """
        Append a connection gene, taking its innovation number from the registry.

        No structural validation is performed beyond the node indices being in range;
        callers are responsible for keeping the enabled genes acyclic.
        """
        self.node_type(node_in)
        self.node_type(node_out)
        gene = Gene(node_in, node_out, weight, registry.new_edge(node_in, node_out), enabled)
        self.genes.append(gene)
        return gene

    def distance(self, other: 'Genome') -> float:
        """
        Calculate genetic distance between this genome and another using the NEAT formula.

           distance = (c1 * E / N) + (c2 * D / N) + c3 * W̄

        Where:
        - E = number of excess genes (beyond the smaller of the two maximum innovation numbers)
        - D = number of disjoint genes (within the shared innovation range, present in one genome only)
        - N = number of genes in the larger genome, or 1 if that is below 20
        - W̄ = average absolute weight difference of matching genes (0 if no genes match)
        - c1, c2, c3 = weight of the various terms (from configuration)

        Parameters:
            other: the genome relative to which we are calculating the distance

        Returns:
            the genetic distance between this genome and 'other'
        """
        genes1 = {gene.innovation: gene for gene in self.genes}
        genes2 = {gene.innovation: gene for gene in other.genes}
        if not genes1 and not genes2:
            return 0.0

        # Find matching and non-matching genes
        matching_innovs     = genes1.keys() & genes2.keys()
        non_matching_innovs = genes1.keys() ^ genes2.keys()

        # Excess   genes: beyond the smaller genome's max innovation number
        # Disjoint genes: within the overlapping range but not matching
        shared_max   = min(max(genes1, default=-1), max(genes2, default=-1))
        num_excess   = sum(1 for innov in non_matching_innovs if innov > shared_max)
        num_disjoint = len(non_matching_innovs) - num_excess

        # Average weight difference for matching genes
        avg_weight_diff = 0.0
        if matching_innovs:
            weight_diff = sum(abs(genes1[i].weight - genes2[i].weight) for i in matching_innovs)
            avg_weight_diff = weight_diff / len(matching_innovs)

        N = max(len(self.genes), len(other.genes))
        if N < SMALL_GENOME_DISTANCE:
            N = 1

        return (self._config.distance_excess_coeff   * num_excess   / N +
                self._config.distance_disjoint_coeff * num_disjoint / N +
                self._config.distance_weight_coeff   * avg_weight_diff)

    def crossover(self,
                  other   : 'Genome',
                  fitness : tuple[float, float],
                  registry: InnovationRegistry,
                  rng     : np.random.Generator | None = None) -> 'Genome':
        """
        Perform NEAT crossover between this genome and another to create offspring.

        NEAT crossover rules:
        - Matching genes: inherit a copy from a randomly chosen parent; a disabled copy
          is re-enabled with probability (1 - crossover_keep_disabled)
        - Disjoint/excess genes: inherit all of them from the fitter parent only;
          on a fitness tie, all of them from one randomly chosen parent

        Parameters:
            other:    the other parent genome
            fitness:  (fitness of 'self', fitness of 'other')
            registry: hands out the offspring ID
            rng:      source of randomness

        Returns:
            New offspring genome (no species, no fitness)
        """
        rng = rng if rng is not None else np.random.default_rng()
        fitness_self, fitness_other = fitness

        if fitness_self > fitness_other:
            fitter, mate = self, other
        elif fitness_other > fitness_self:
            fitter, mate = other, self
        else:
            fitter, mate = (self, other) if rng.random() < 0.5 else (other, self)

        mate_genes = {gene.innovation: gene for gene in mate.genes}

        # The offspring's genes are exactly the fitter parent's innovations:
        # those it shares with the mate plus its own disjoint & excess genes.
        offspring = Genome(self._config, registry)
        offspring.node_count = max(self.node_count, other.node_count)
        for gene in fitter.genes:
            mate_gene = mate_genes.get(gene.innovation)

            # Disjoint & excess gene: inherit from the fitter parent
            if mate_gene is None:
                offspring.genes.append(gene.copy())
                continue

            # Matching gene: inherit randomly from either parent
            inherited = (gene if rng.random() < 0.5 else mate_gene).copy()
            if not inherited.enabled and rng.random() >= self._config.crossover_keep_disabled:
                inherited.enabled = True
            offspring.genes.append(inherited)

        return offspring

    def mutate(self, registry: InnovationRegistry, rng: np.random.Generator | None = None) -> 'Genome':
        """
        Create a mutated copy of the current genome.

        The mutations are applied in this order, each one occurring stochastically:
          + mutate the weights of the enabled connections (and possibly disable them)
          + add a connection
          + add a node (splitting an existing connection)

        The mutated genome keeps this genome's ID and species; its fitness is cleared.

        Parameters:
            registry: hands out innovation numbers for new connections
            rng:      source of randomness

        Returns:
            The mutated genome
        """
        rng = rng if rng is not None else np.random.default_rng()

        mutant = copy.copy(self)
        mutant.genes          = [gene.copy() for gene in self.genes]
        mutant.fitness        = None
        mutant.shared_fitness = None

        mutant._mutate_weights(rng)
        if rng.random() < self._config.mutate_add_edge:
            mutant._mutate_add_edge(registry, rng)
        if mutant.genes and rng.random() < self._config.mutate_add_node:
            mutant._mutate_add_node(registry, rng)

        return mutant

    def clone(self, registry: InnovationRegistry) -> 'Genome':
        """
        Create a genetically identical copy of this genome, with a new ID, no species and no fitness.
        """
        twin = copy.copy(self)
        twin.genes          = [gene.copy() for gene in self.genes]
        twin.id             = registry.new_genome()
        twin.species        = None
        twin.fitness        = None
        twin.shared_fitness = None
        return twin

    def _mutate_weights(self, rng: np.random.Generator) -> None:
        """
        Mutate the weight of each enabled connection, and possibly disable it.

        A weight is mutated with probability 'mutate_weight'. It is then either
        replaced by a new random value (with probability 'mutate_weight_reset')
        or scaled by a random factor. Independently, the connection is disabled
        with probability 'mutate_disable_edge'.
        """
        for gene in self.genes:
            if not gene.enabled:
                continue

            if rng.random() < self._config.mutate_weight:
                if rng.random() < self._config.mutate_weight_reset:
                    gene.weight = float(rng.uniform(-1.0, 1.0))
                else:
                    gene.weight *= float(rng.uniform(-1.0, 1.0))

            if rng.random() < self._config.mutate_disable_edge:
                gene.enabled = False

    def _mutate_add_edge(self, registry: InnovationRegistry, rng: np.random.Generator) -> bool:
        """
        Add a new connection between two existing nodes.

        The nodes representing the two ends of the new connection
        are selected at random, however we cannot add a connection:
         + from a node to itself
         + between two nodes already connected by a gene (in either direction)
         + starting at an OUTPUT node
         + ending   at a SENSOR node
         + which would create a cycle among the enabled connections

        The method gives up silently after 'mutate_add_edge_tries' failed attempts.

        Returns:
            whether a connection was added
        """
        connected = {(gene.node_in, gene.node_out) for gene in self.genes}

        for _ in range(self._config.mutate_add_edge_tries):

            node_in  = int(rng.integers(self.node_count))
            node_out = int(rng.integers(self.node_count))

            # Carry out quick checks first
            if node_in == node_out:
                continue
            if (node_in, node_out) in connected or (node_out, node_in) in connected:
                continue
            if self.node_type(node_in) == NodeType.OUTPUT:
                continue
            if self.node_type(node_out) == NodeType.SENSOR:
                continue

            # Carry out expensive check last
            if self._is_reachable(node_out, node_in):
                continue

            self.add_gene(node_in, node_out, float(rng.uniform(-1.0, 1.0)), registry)
            return True

        return False

    def _mutate_add_node(self, registry: InnovationRegistry, rng: np.random.Generator) -> bool:
        """
        Split an existing enabled connection by adding a new hidden node.

        The split connection is disabled and replaced by two new connections:
        'in -> new node' with weight 1.0, and 'new node -> out' with a random weight.

        Returns:
            whether a node was added
        """
        split_gene = self._pick_split_gene(rng)
        if split_gene is None:
            return False

        split_gene.enabled = False

        new_node = self.node_count
        self.node_count += 1

        self.add_gene(split_gene.node_in, new_node, 1.0, registry)
        self.add_gene(new_node, split_gene.node_out, float(rng.uniform(-1.0, 1.0)), registry)
        return True

    def _pick_split_gene(self, rng: np.random.Generator) -> Gene | None:
        """
        Select the enabled connection to split.

        Young (small) genomes preferentially refine their oldest structure: while
        the genome has fewer than SMALL_GENOME_SIZE genes, a few attempts are made
        to pick an enabled gene among the earliest inserted ones. Otherwise, the
        connection is chosen uniformly among the enabled ones.
        """
        num_genes = len(self.genes)
        if num_genes < SMALL_GENOME_SIZE:
            oldest = max(1, num_genes - int(math.sqrt(num_genes)))
            for _ in range(20):
                gene = self.genes[int(rng.integers(oldest))]
                if gene.enabled:
                    return gene

        enabled_genes = self.enabled_genes
        if not enabled_genes:
            return None
        return enabled_genes[int(rng.integers(len(enabled_genes)))]

    def _is_reachable(self, start: int, target: int) -> bool:
        """
        Check whether 'target' can be reached from 'start' following enabled connections.

        Adding a connection 'a -> b' creates a cycle exactly when 'a' is reachable from 'b'.
        """
        adjacency = defaultdict(list)
        for gene in self.genes:
            if gene.enabled:
                adjacency[gene.node_in].append(gene.node_out)

        visited = set()
        stack   = [start]
        while stack:
            current = stack.pop()
            if current == target:
                return True
            if current in visited:
                continue
            visited.add(current)
            stack.extend(adjacency[current])

        return False

    def is_acyclic(self) -> bool:
        """
        Check whether the enabled connections form a DAG, using Kahn's algorithm.
        """
        adjacency = defaultdict(list)
        in_degree = [0] * self.node_count
        for gene in self.genes:
            if gene.enabled:
                adjacency[gene.node_in].append(gene.node_out)
                in_degree[gene.node_out] += 1

        queue   = deque(node for node in range(self.node_count) if in_degree[node] == 0)
        visited = 0
        while queue:
            node = queue.popleft()
            visited += 1
            for neighbor in adjacency[node]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        return visited == self.node_count

    def simulate(self, inputs) -> list[float]:
        """
        Evaluate the network encoded by this genome.

        Parameters:
            inputs: one value per sensor node, in sensor order

        Returns:
            one value per output node, in output order
        """
        # Import here to avoid circular import
        from neatevo.phenotype.network import simulate
        return simulate(self, inputs)

    def __str__(self):
        genes_str = ''.join(str(gene) for gene in self.genes)
        return (f"Genome {self.id} (species={self.species}, fitness={self.fitness}, nodes={self.node_count})\n"
                f"Genes: {genes_str}")
