"""Unit tests for taxosim.traversal module."""

import itertools

import pytest

from taxosim.filters import PredicateFilter
from taxosim.graph import CSRGraph
from taxosim.traversal import (
    ancestors,
    bfs_shortest_path,
    find_lcas,
    max_taxonomy_depth,
    path_length_to_ancestor,
    rooted_depth,
    shortest_path_length,
)


CONCEPTS = ["animal", "mammal", "bird", "dog", "cat", "penguin"]


class AdjacencyStore:
    """Minimal dict-backed store: traversal only needs the three queries."""

    def __init__(self, triples):
        self.out = {}
        self.inc = {}
        for subject, obj, predicate in triples:
            self.out.setdefault(subject, []).append((obj, predicate))
            self.inc.setdefault(obj, []).append((subject, predicate))
            self.out.setdefault(obj, [])
            self.inc.setdefault(subject, [])

    def has_node(self, node_id):
        return node_id in self.out

    def outgoing_edges(self, node_id):
        return list(self.out.get(node_id, []))

    def incoming_edges(self, node_id):
        return list(self.inc.get(node_id, []))


class TestBfsShortestPath:
    """Tests for the undirected shortest path."""

    def test_siblings(self, taxonomy):
        assert bfs_shortest_path(taxonomy, "dog", "cat") == ["dog", "mammal", "cat"]

    def test_reverse_direction(self, taxonomy):
        assert bfs_shortest_path(taxonomy, "cat", "dog") == ["cat", "mammal", "dog"]

    def test_downward_path(self, taxonomy):
        """Edges are walked against their direction too."""
        assert bfs_shortest_path(taxonomy, "animal", "dog") == ["animal", "mammal", "dog"]

    def test_same_node(self, taxonomy):
        assert bfs_shortest_path(taxonomy, "dog", "dog") == ["dog"]

    def test_disconnected(self, taxonomy):
        assert bfs_shortest_path(taxonomy, "dog", "plant") is None

    def test_missing_nodes(self, taxonomy):
        assert bfs_shortest_path(taxonomy, "dog", "unicorn") is None
        assert bfs_shortest_path(taxonomy, "unicorn", "dog") is None
        assert bfs_shortest_path(taxonomy, "unicorn", "unicorn") is None

    def test_cousins(self, taxonomy):
        assert bfs_shortest_path(taxonomy, "dog", "penguin") == [
            "dog", "mammal", "animal", "bird", "penguin"
        ]

    def test_filter_excludes_shortcut(self, taxonomy_with_shortcut):
        graph = taxonomy_with_shortcut
        assert bfs_shortest_path(graph, "dog", "penguin") == ["dog", "penguin"]
        assert shortest_path_length(graph, "dog", "penguin", "is-a") == 4
        assert shortest_path_length(graph, "penguin", "dog", ["is-a"]) == 4

    def test_filter_applies_to_incoming_edges(self, taxonomy_with_shortcut):
        """Walking an edge backwards still checks its predicate."""
        assert shortest_path_length(taxonomy_with_shortcut, "penguin", "dog", "eats") == 1
        assert shortest_path_length(taxonomy_with_shortcut, "penguin", "dog", "part-of") is None

    def test_empty_whitelist_blocks_everything(self, taxonomy):
        assert bfs_shortest_path(taxonomy, "dog", "cat", []) is None
        assert bfs_shortest_path(taxonomy, "dog", "dog", []) == ["dog"]

    def test_filter_object_and_list_agree(self, taxonomy):
        as_list = bfs_shortest_path(taxonomy, "dog", "penguin", ["is-a"])
        as_filter = bfs_shortest_path(
            taxonomy, "dog", "penguin", PredicateFilter.coerce("is-a")
        )
        assert as_list == as_filter

    def test_path_edges_are_real(self, taxonomy):
        path = bfs_shortest_path(taxonomy, "cat", "penguin")
        for a, b in zip(path, path[1:]):
            linked = [n for n, _ in taxonomy.outgoing_edges(a) + taxonomy.incoming_edges(a)]
            assert b in linked
        assert len(set(path)) == len(path)

    def test_length_is_symmetric(self, taxonomy):
        for a, b in itertools.product(CONCEPTS, repeat=2):
            assert shortest_path_length(taxonomy, a, b) == shortest_path_length(taxonomy, b, a)

    def test_path_length(self, taxonomy):
        assert shortest_path_length(taxonomy, "dog", "dog") == 0
        assert shortest_path_length(taxonomy, "dog", "mammal") == 1
        assert shortest_path_length(taxonomy, "dog", "animal") == 2
        assert shortest_path_length(taxonomy, "dog", "plant") is None

    def test_works_on_any_store(self):
        store = AdjacencyStore([("dog", "mammal", "is-a"), ("cat", "mammal", "is-a")])
        assert bfs_shortest_path(store, "dog", "cat") == ["dog", "mammal", "cat"]


class TestRootedDepth:
    """Tests for depth measured along outgoing edges."""

    @pytest.mark.parametrize(
        "node,expected",
        [("animal", 0), ("mammal", 1), ("bird", 1), ("dog", 2), ("penguin", 2)],
    )
    def test_depths(self, taxonomy, node, expected):
        assert rooted_depth(taxonomy, node) == expected

    def test_missing_node(self, taxonomy):
        assert rooted_depth(taxonomy, "unicorn") == 0

    def test_isolated_node(self, taxonomy):
        assert rooted_depth(taxonomy, "plant") == 0

    def test_multiple_parents_uses_bfs_distance(self):
        """With several routes up, the BFS (shortest) distance to each node counts."""
        graph = CSRGraph.from_edges([
            ("x", "a", "is-a"),
            ("a", "c", "is-a"),
            ("x", "c", "is-a"),
        ])
        assert rooted_depth(graph, "x") == 1

    def test_cycle_terminates(self):
        graph = CSRGraph.from_edges([("a", "b", "is-a"), ("b", "a", "is-a")])
        assert rooted_depth(graph, "a") == 1

    def test_filter(self, taxonomy_with_shortcut):
        """The eats edge reaches penguin at depth 1, but not deeper than is-a."""
        assert rooted_depth(taxonomy_with_shortcut, "dog", "eats") == 1
        assert rooted_depth(taxonomy_with_shortcut, "dog", "is-a") == 2

    def test_max_taxonomy_depth(self, taxonomy):
        assert max_taxonomy_depth(taxonomy) == 2
        assert max_taxonomy_depth(taxonomy, "part-of") == 0


class TestAncestors:
    def test_closure_in_bfs_order(self, taxonomy):
        assert ancestors(taxonomy, "dog") == ["dog", "mammal", "animal"]

    def test_missing_node(self, taxonomy):
        assert ancestors(taxonomy, "unicorn") == []


class TestFindLcas:
    """Tests for the common ancestor set."""

    def test_siblings(self, taxonomy):
        assert find_lcas(taxonomy, "dog", "cat") == ["mammal", "animal"]

    def test_cousins(self, taxonomy):
        assert find_lcas(taxonomy, "dog", "penguin") == ["animal"]

    def test_same_node_contains_itself(self, taxonomy):
        for node in CONCEPTS:
            assert node in find_lcas(taxonomy, node, node)

    def test_ancestor_pair(self, taxonomy):
        assert find_lcas(taxonomy, "mammal", "dog") == ["mammal", "animal"]
        assert find_lcas(taxonomy, "dog", "mammal") == ["mammal", "animal"]

    def test_no_common_ancestor(self, taxonomy):
        assert find_lcas(taxonomy, "dog", "plant") == []

    def test_missing_node(self, taxonomy):
        assert find_lcas(taxonomy, "dog", "unicorn") == []
        assert find_lcas(taxonomy, "unicorn", "unicorn") == []

    def test_filter(self, taxonomy):
        assert find_lcas(taxonomy, "dog", "cat", "part-of") == []

    def test_multiple_candidates_are_all_reported(self):
        """Two incomparable common ancestors are both returned."""
        graph = CSRGraph.from_edges([
            ("x", "p", "is-a"),
            ("x", "q", "is-a"),
            ("y", "p", "is-a"),
            ("y", "q", "is-a"),
        ])
        assert set(find_lcas(graph, "x", "y")) == {"p", "q"}

    def test_no_duplicates(self):
        graph = CSRGraph.from_edges([
            ("x", "a", "is-a"),
            ("x", "b", "is-a"),
            ("a", "top", "is-a"),
            ("b", "top", "is-a"),
        ])
        lcas = find_lcas(graph, "x", "x")
        assert len(lcas) == len(set(lcas))


class TestPathLengthToAncestor:
    def test_grandparent(self, taxonomy):
        assert path_length_to_ancestor(taxonomy, "dog", "animal") == 2

    def test_parent(self, taxonomy):
        assert path_length_to_ancestor(taxonomy, "dog", "mammal") == 1

    def test_self(self, taxonomy):
        for node in CONCEPTS:
            assert path_length_to_ancestor(taxonomy, node, node) == 0

    def test_wrong_direction(self, taxonomy):
        assert path_length_to_ancestor(taxonomy, "animal", "dog") is None

    def test_unrelated(self, taxonomy):
        assert path_length_to_ancestor(taxonomy, "dog", "bird") is None

    def test_missing_nodes(self, taxonomy):
        assert path_length_to_ancestor(taxonomy, "unicorn", "animal") is None
        assert path_length_to_ancestor(taxonomy, "dog", "unicorn") is None
        assert path_length_to_ancestor(taxonomy, "unicorn", "unicorn") is None

    def test_filter(self, taxonomy_with_shortcut):
        assert path_length_to_ancestor(taxonomy_with_shortcut, "dog", "animal", "is-a") == 2
        assert path_length_to_ancestor(taxonomy_with_shortcut, "dog", "bird", "is-a") is None
        assert path_length_to_ancestor(taxonomy_with_shortcut, "dog", "bird") == 2


class TestParallelEdges:
    """Two labels between the same pair: the filter keeps only one of them."""

    @pytest.fixture
    def parts(self):
        return CSRGraph.from_edges([
            ("wheel", "car", "part-of"),
            ("wheel", "car", "is-a"),
            ("car", "vehicle", "is-a"),
            ("tire", "wheel", "part-of"),
        ])

    def test_either_label_connects_the_pair(self, parts):
        assert bfs_shortest_path(parts, "wheel", "car", "part-of") == ["wheel", "car"]
        assert bfs_shortest_path(parts, "wheel", "car", "is-a") == ["wheel", "car"]

    def test_shortest_path_stops_at_label_boundary(self, parts):
        assert bfs_shortest_path(parts, "tire", "vehicle") == ["tire", "wheel", "car", "vehicle"]
        assert bfs_shortest_path(parts, "tire", "vehicle", "part-of") is None
        assert bfs_shortest_path(parts, "tire", "vehicle", "is-a") is None

    def test_rooted_depth(self, parts):
        assert rooted_depth(parts, "wheel") == 2
        assert rooted_depth(parts, "wheel", "is-a") == 2
        assert rooted_depth(parts, "wheel", "part-of") == 1

    def test_path_length_to_ancestor(self, parts):
        assert path_length_to_ancestor(parts, "tire", "car", "part-of") == 2
        assert path_length_to_ancestor(parts, "tire", "car", "is-a") is None

    def test_lcas(self, parts):
        assert find_lcas(parts, "tire", "wheel", "part-of") == ["wheel", "car"]
        assert find_lcas(parts, "tire", "wheel", "is-a") == []
