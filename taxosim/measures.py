"""Semantic similarity and distance measures over a taxonomy.

Every measure has the signature ``measure(graph, concept1, concept2,
options=None) -> float`` and returns 0 when either concept is missing or
nothing connects them under the active predicate filter.

Recognised options: ``predicates`` (label or list of labels), ``max_depth``
(taxonomy depth D, required by Resnik edge and Leacock-Chodorow) and, for
Hirst-St-Onge, ``C``, ``k`` and ``max_length``. ``maxDepth`` and
``maxLength`` are accepted as aliases.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from taxosim.filters import PredicateFilter
from taxosim.hirst_st_onge import (
    DEFAULT_C,
    DEFAULT_K,
    DEFAULT_MAX_LENGTH,
    HirstStOngeConfig,
    hirst_st_onge_score,
)
from taxosim.traversal import (
    find_lcas,
    path_length_to_ancestor,
    rooted_depth,
    shortest_path_length,
)

logger = logging.getLogger(__name__)

_OPTION_ALIASES = {
    "maxDepth": "max_depth",
    "maxLength": "max_length",
}


class UnknownMeasureError(KeyError):
    """Raised when a measure name is not registered."""


@dataclass(frozen=True)
class MeasureOptions:
    """Options shared by all measures."""

    predicates: PredicateFilter = PredicateFilter()
    max_depth: Optional[float] = None
    C: float = DEFAULT_C
    k: float = DEFAULT_K
    max_length: int = DEFAULT_MAX_LENGTH

    def __post_init__(self):
        object.__setattr__(self, "predicates", PredicateFilter.coerce(self.predicates))
        # Fail on bad search settings up front rather than mid-request
        self.hirst_st_onge_config()

    @classmethod
    def coerce(cls, options) -> "MeasureOptions":
        """Normalize None, a dict or a MeasureOptions instance.

        Raises:
            ValueError: if a numeric option is not a finite number, or
                ``max_length`` is not a whole number.
        """
        if isinstance(options, MeasureOptions):
            return options
        if not options:
            return cls()

        values = {}
        for key, value in options.items():
            key = _OPTION_ALIASES.get(key, key)
            if key == "predicates":
                values[key] = PredicateFilter.coerce(value)
            elif key in ("max_depth", "C", "k"):
                if value is not None:
                    values[key] = _as_number(key, value)
            elif key == "max_length":
                if value is not None:
                    values[key] = _as_integer(key, value)
            else:
                logger.debug("Ignoring unknown measure option %r", key)
        return cls(**values)

    def hirst_st_onge_config(self) -> HirstStOngeConfig:
        return HirstStOngeConfig(
            C=self.C, k=self.k, max_length=self.max_length, predicates=self.predicates
        )


def _as_number(key, value):
    if isinstance(value, bool):
        raise ValueError(f"Option {key!r} must be numeric, got {value!r}")
    if not isinstance(value, (int, float)):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ValueError(
                f"Option {key!r} must be numeric, got {value!r}"
            ) from None
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Option {key!r} must be finite, got {value!r}")
    return value


def _as_integer(key, value):
    value = _as_number(key, value)
    if value != int(value):
        raise ValueError(f"Option {key!r} must be a whole number, got {value!r}")
    return int(value)


def shortest_path(graph, concept1, concept2, options=None) -> float:
    """Rada distance: number of edges on the shortest undirected path.

    m(c1, c2) = length(sp(c1, c2)). Rada et al. (1989), Definition 1.
    """
    options = MeasureOptions.coerce(options)
    length = shortest_path_length(graph, concept1, concept2, options.predicates)
    return length if length is not None else 0


def rada_similarity(graph, concept1, concept2, options=None) -> float:
    """m(c1, c2) = 1 / (1 + length(sp(c1, c2))). Rezgui et al. (2013), Eq. 1."""
    options = MeasureOptions.coerce(options)
    length = shortest_path_length(graph, concept1, concept2, options.predicates)
    if length is None:
        return 0
    return 1 / (1 + length)


def resnik_edge(graph, concept1, concept2, options=None) -> float:
    """m(c1, c2) = 2 * D - length(sp(c1, c2)). Resnik (1999), Eq. 5."""
    options = MeasureOptions.coerce(options)
    if options.max_depth is None:
        return 0
    length = shortest_path_length(graph, concept1, concept2, options.predicates)
    if length is None:
        return 0
    return 2 * options.max_depth - length


def _lca_path_lengths(graph, concept1, concept2, predicates):
    """Yield (lca, len1, len2) for every LCA reachable from both concepts."""
    for lca in find_lcas(graph, concept1, concept2, predicates):
        len1 = path_length_to_ancestor(graph, concept1, lca, predicates)
        len2 = path_length_to_ancestor(graph, concept2, lca, predicates)
        if len1 is not None and len2 is not None:
            yield lca, len1, len2


def wu_palmer(graph, concept1, concept2, options=None) -> float:
    """Wu & Palmer (1994).

    m(c1, c2) = 2 * depth(lcs) / (2 * depth(lcs) + len(c1, lcs) + len(c2, lcs)),
    maximised over the LCA candidates. Candidates of depth 0 are skipped.
    """
    options = MeasureOptions.coerce(options)
    best = 0
    for lca, len1, len2 in _lca_path_lengths(
        graph, concept1, concept2, options.predicates
    ):
        depth = rooted_depth(graph, lca, options.predicates)
        if depth > 0:
            best = max(best, (2 * depth) / (2 * depth + len1 + len2))
    return best


def leacock_chodorow(graph, concept1, concept2, options=None) -> float:
    """Leacock & Chodorow (1998).

    m(c1, c2) = log(2 * D) - log(N) where N is the node count of the shortest
    path through a common ancestor.
    """
    options = MeasureOptions.coerce(options)
    if options.max_depth is None or options.max_depth <= 0:
        return 0

    shortest = None
    for _lca, len1, len2 in _lca_path_lengths(
        graph, concept1, concept2, options.predicates
    ):
        if shortest is None or len1 + len2 < shortest:
            shortest = len1 + len2

    if shortest is None:
        return 0
    return math.log(2 * options.max_depth) - math.log(shortest + 1)


def hirst_st_onge(graph, concept1, concept2, options=None) -> float:
    """Hirst & St-Onge (1998): C - path length - k * direction changes."""
    options = MeasureOptions.coerce(options)
    return hirst_st_onge_score(
        graph, concept1, concept2, options.hirst_st_onge_config()
    )


MEASURES = {
    "shortest_path": shortest_path,
    "rada_similarity": rada_similarity,
    "resnik_edge": resnik_edge,
    "wu_palmer": wu_palmer,
    "leacock_chodorow": leacock_chodorow,
    "hirst_st_onge": hirst_st_onge,
}


def get_measure(name):
    """Look up a measure function by name."""
    try:
        return MEASURES[name]
    except KeyError:
        raise UnknownMeasureError(name) from None


def compute_all_measures(graph, concept1, concept2, options=None) -> dict:
    """Score a concept pair with every registered measure."""
    options = MeasureOptions.coerce(options)
    for concept in (concept1, concept2):
        if not graph.has_node(concept):
            logger.debug("Concept %r not in graph, all measures score 0", concept)
    return {
        name: measure(graph, concept1, concept2, options)
        for name, measure in MEASURES.items()
    }


def similarity_matrix(graph, concepts, measure="rada_similarity", options=None):
    """Pairwise scores for a list of concepts as a square numpy array.

    ``measure`` is a registered name or a measure function. Only the upper
    triangle is computed, so the measure must be symmetric in its two
    concepts (all registered measures are).
    """
    measure_fn = get_measure(measure) if isinstance(measure, str) else measure
    options = MeasureOptions.coerce(options)

    n = len(concepts)
    matrix = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        for j in range(i, n):
            score = measure_fn(graph, concepts[i], concepts[j], options)
            matrix[i, j] = score
            matrix[j, i] = score
    return matrix
