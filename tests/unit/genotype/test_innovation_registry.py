"""
Unit tests for the InnovationRegistry class.
"""

import threading

from neatevo.genotype.innovation_registry import InnovationRegistry


# ============================================================================
# Test: Innovation numbers
# ============================================================================

class TestNewEdge:
    """Test assignment of innovation numbers to connections."""

    def test_first_innovation_is_zero(self, registry):
        """Innovation numbers start at 0."""
        assert registry.new_edge(0, 2) == 0
        assert registry.edge_count == 1

    def test_same_connection_same_number(self, registry):
        """Repeating a connection returns the existing innovation number."""
        first  = registry.new_edge(0, 2)
        second = registry.new_edge(1, 2)
        assert registry.new_edge(0, 2) == first
        assert registry.new_edge(1, 2) == second
        assert registry.edge_count == 2

    def test_distinct_connections_sequential(self, registry):
        """Distinct connections get consecutive numbers."""
        numbers = [registry.new_edge(a, b) for a, b in [(0, 2), (1, 2), (0, 3), (3, 2)]]
        assert numbers == [0, 1, 2, 3]

    def test_direction_matters(self, registry):
        """(a, b) and (b, a) are different connections."""
        assert registry.new_edge(3, 4) != registry.new_edge(4, 3)
        assert registry.edge_count == 2

    def test_registries_are_independent(self):
        """Two registries never share state."""
        registry1 = InnovationRegistry()
        registry2 = InnovationRegistry()
        registry1.new_edge(0, 2)
        registry1.new_edge(1, 2)
        assert registry2.new_edge(1, 2) == 0
        assert registry2.edge_count == 1


# ============================================================================
# Test: Species and genome IDs
# ============================================================================

class TestCounters:
    """Test the species and genome ID counters."""

    def test_species_ids_sequential(self, registry):
        """Species IDs start at 0 and increase by one."""
        assert [registry.new_specie() for _ in range(3)] == [0, 1, 2]

    def test_genome_ids_sequential(self, registry):
        """Genome IDs start at 0 and increase by one."""
        assert [registry.new_genome() for _ in range(3)] == [0, 1, 2]

    def test_counters_are_independent(self, registry):
        """The three counters do not interfere with each other."""
        registry.new_edge(0, 2)
        registry.new_edge(1, 2)
        assert registry.new_specie() == 0
        assert registry.new_genome() == 0
        assert registry.new_genome() == 1
        assert registry.new_specie() == 1
        assert registry.new_edge(0, 3) == 2


# ============================================================================
# Test: Thread safety
# ============================================================================

class TestThreadSafety:
    """Test concurrent use of a registry."""

    def test_concurrent_new_edge(self, registry):
        """Threads requesting the same connections agree on their innovation numbers."""
        pairs   = [(a, b) for a in range(10) for b in range(10, 20)]
        results = [None] * 8

        def worker(slot):
            results[slot] = [registry.new_edge(a, b) for a, b in pairs]

        threads = [threading.Thread(target=worker, args=(slot,)) for slot in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(result == results[0] for result in results)
        assert sorted(results[0]) == list(range(len(pairs)))
        assert registry.edge_count == len(pairs)

    def test_concurrent_new_genome(self, registry):
        """Genome IDs handed out concurrently are all distinct."""
        ids  = []
        lock = threading.Lock()

        def worker():
            local = [registry.new_genome() for _ in range(200)]
            with lock:
                ids.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(ids) == list(range(1000))
