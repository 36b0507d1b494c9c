"""Pytest fixtures shared across all test modules."""

import pytest

from taxosim.graph import CSRGraph


# Taxonomy used throughout the tests (edges point child -> parent):
#
#       animal
#       /    \
#    mammal  bird
#     /   \    \
#   dog   cat  penguin
TAXONOMY_EDGES = [
    ("mammal", "animal", "is-a"),
    ("bird", "animal", "is-a"),
    ("dog", "mammal", "is-a"),
    ("cat", "mammal", "is-a"),
    ("penguin", "bird", "is-a"),
]


@pytest.fixture
def taxonomy():
    """The animal taxonomy plus an unconnected 'plant' node."""
    return CSRGraph.from_edges(TAXONOMY_EDGES, nodes=["plant"])


@pytest.fixture
def taxonomy_with_shortcut():
    """The animal taxonomy with an extra non-taxonomic 'eats' edge."""
    return CSRGraph.from_edges(TAXONOMY_EDGES + [("dog", "penguin", "eats")])
