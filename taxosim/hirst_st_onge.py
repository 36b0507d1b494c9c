"""Hirst-St-Onge lexical chain search.

Breadth-first search over chain states. A chain may go UP (follow an
outgoing edge towards a more general concept) or DOWN (follow an incoming
edge towards a more specific one). Each completed chain between the two
concepts scores

    C - length - k * changes

where ``changes`` counts direction reversals along the chain. The search
does not stop at the first completion: it enumerates every simple chain up
to ``max_length`` edges and keeps the best score, clamped at 0.

The number of chains grows exponentially with ``max_length``; keep it small
on dense graphs.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional

from taxosim.filters import PredicateFilter

DEFAULT_C = 8
DEFAULT_K = 1
DEFAULT_MAX_LENGTH = 5


class Direction(Enum):
    """Direction of a chain step relative to the stored edge."""

    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class HirstStOngeConfig:
    """Scoring constants and search bounds."""

    C: float = DEFAULT_C
    k: float = DEFAULT_K
    max_length: int = DEFAULT_MAX_LENGTH
    predicates: PredicateFilter = PredicateFilter()

    def __post_init__(self):
        if self.k < 0:
            raise ValueError(f"k must be non-negative, got {self.k}")
        if self.max_length < 0:
            raise ValueError(f"max_length must be non-negative, got {self.max_length}")
        object.__setattr__(self, "predicates", PredicateFilter.coerce(self.predicates))


class ChainResult(NamedTuple):
    """Best chain found by the search.

    ``path`` is None when no chain within ``max_length`` scores above 0.
    """

    score: float
    path: Optional[list]
    changes: int


class _State(NamedTuple):
    # Index into the arena for the last step of this chain
    slot: int
    length: int
    direction: Optional[Direction]
    changes: int
    visited: frozenset


def _valid_steps(graph, node, edge_filter):
    """Outgoing steps (UP) followed by incoming steps (DOWN)."""
    steps = [
        (neighbor, Direction.UP) for neighbor, _pred in edge_filter.outgoing(graph, node)
    ]
    steps.extend(
        (neighbor, Direction.DOWN) for neighbor, _pred in edge_filter.incoming(graph, node)
    )
    return steps


def _rebuild_path(arena, slot):
    path = []
    while slot is not None:
        node, slot = arena[slot]
        path.append(node)
    path.reverse()
    return path


def find_best_chain(graph, concept1, concept2, config=None) -> ChainResult:
    """Search for the best-scoring chain from ``concept1`` to ``concept2``.

    Missing concepts score 0. Among equally scored chains the first one
    dequeued wins.
    """
    config = config or HirstStOngeConfig()

    if not graph.has_node(concept1) or not graph.has_node(concept2):
        return ChainResult(0, None, 0)

    edge_filter = config.predicates

    # Each arena entry is (node, parent slot); states only hold a slot, so
    # chains sharing a prefix share its entries.
    arena = [(concept1, None)]
    queue = deque([_State(0, 0, None, 0, frozenset([concept1]))])

    best_score = 0
    best_slot = None
    best_changes = 0

    while queue:
        state = queue.popleft()

        if state.length > config.max_length:
            continue

        node = arena[state.slot][0]
        if node == concept2:
            score = config.C - state.length - config.k * state.changes
            if score > best_score:
                best_score = score
                best_slot = state.slot
                best_changes = state.changes
            continue

        if state.length == config.max_length:
            continue

        for neighbor, direction in _valid_steps(graph, node, edge_filter):
            if neighbor in state.visited:
                continue

            changes = state.changes
            if state.direction is not None and direction != state.direction:
                changes += 1

            arena.append((neighbor, state.slot))
            queue.append(
                _State(
                    len(arena) - 1,
                    state.length + 1,
                    direction,
                    changes,
                    state.visited | {neighbor},
                )
            )

    if best_slot is None:
        return ChainResult(0, None, 0)
    return ChainResult(best_score, _rebuild_path(arena, best_slot), best_changes)


def hirst_st_onge_score(graph, concept1, concept2, config=None) -> float:
    """Best chain score between two concepts, never below 0."""
    return max(find_best_chain(graph, concept1, concept2, config).score, 0)
