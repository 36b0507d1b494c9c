"""
taxosim - Semantic similarity measures over is-a taxonomies
"""

__version__ = "0.1.0"

from taxosim.diagnostics import describe_taxonomy
from taxosim.filters import PredicateFilter
from taxosim.graph import CSRGraph, TaxonomyStore
from taxosim.hirst_st_onge import (
    ChainResult,
    Direction,
    HirstStOngeConfig,
    find_best_chain,
    hirst_st_onge_score,
)
from taxosim.loader import TaxonomyLoadError, build_graph_from_jsonl
from taxosim.measures import (
    MEASURES,
    MeasureOptions,
    UnknownMeasureError,
    compute_all_measures,
    get_measure,
    hirst_st_onge,
    leacock_chodorow,
    rada_similarity,
    resnik_edge,
    shortest_path,
    similarity_matrix,
    wu_palmer,
)
from taxosim.traversal import (
    ancestors,
    bfs_shortest_path,
    find_lcas,
    max_taxonomy_depth,
    path_length_to_ancestor,
    rooted_depth,
    shortest_path_length,
)

__all__ = [
    # Core classes
    "CSRGraph",
    "TaxonomyStore",
    "PredicateFilter",
    # Loading
    "build_graph_from_jsonl",
    "TaxonomyLoadError",
    # Traversal
    "bfs_shortest_path",
    "shortest_path_length",
    "rooted_depth",
    "ancestors",
    "find_lcas",
    "path_length_to_ancestor",
    "max_taxonomy_depth",
    # Constrained search
    "ChainResult",
    "Direction",
    "HirstStOngeConfig",
    "find_best_chain",
    "hirst_st_onge_score",
    # Measures
    "MEASURES",
    "MeasureOptions",
    "UnknownMeasureError",
    "get_measure",
    "compute_all_measures",
    "similarity_matrix",
    "shortest_path",
    "rada_similarity",
    "resnik_edge",
    "wu_palmer",
    "leacock_chodorow",
    "hirst_st_onge",
    # Diagnostics
    "describe_taxonomy",
]
