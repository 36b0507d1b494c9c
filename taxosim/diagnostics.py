"""Structural diagnostics for a loaded taxonomy."""
from collections import Counter

import numpy as np

from taxosim.filters import PredicateFilter
from taxosim.graph import CSRGraph
from taxosim.traversal import rooted_depth


def describe_taxonomy(graph: CSRGraph, predicates=None, verbose=True, top_n=10):
    """
    Summarize the shape of a taxonomy under a predicate filter.

    Roots have no outgoing filtered edges (nothing more general), leaves have
    no incoming filtered edges (nothing more specific).
    """
    edge_filter = PredicateFilter.coerce(predicates)

    roots = []
    leaves = []
    isolated = []
    parent_counts = np.zeros(graph.num_nodes, dtype=np.int64)
    child_counts = np.zeros(graph.num_nodes, dtype=np.int64)

    for node_idx, node_id in enumerate(graph.node_ids()):
        parent_counts[node_idx] = len(edge_filter.outgoing(graph, node_id))
        child_counts[node_idx] = len(edge_filter.incoming(graph, node_id))
        if parent_counts[node_idx] == 0 and child_counts[node_idx] == 0:
            isolated.append(node_id)
        elif parent_counts[node_idx] == 0:
            roots.append(node_id)
        elif child_counts[node_idx] == 0:
            leaves.append(node_id)

    depths = Counter(
        rooted_depth(graph, node_id, edge_filter) for node_id in graph.node_ids()
    )
    max_depth = max(depths) if depths else 0

    predicate_counts = [
        (pred, count)
        for pred, count in graph.get_predicate_stats()
        if edge_filter.allows(pred)
    ]

    hubs = sorted(
        ((graph.get_node_id(idx), int(child_counts[idx])) for idx in range(graph.num_nodes)),
        key=lambda x: x[1],
        reverse=True,
    )[:top_n]

    summary = {
        "num_nodes": graph.num_nodes,
        "num_edges": sum(count for _, count in predicate_counts),
        "predicates": predicate_counts,
        "roots": roots,
        "leaves": leaves,
        "isolated": isolated,
        "multi_parent_nodes": int(np.count_nonzero(parent_counts > 1)),
        "max_depth": max_depth,
        "depth_distribution": dict(sorted(depths.items())),
        "top_hubs": hubs,
    }

    if verbose:
        _print_summary(summary, edge_filter)

    return summary


def _print_summary(summary, edge_filter):
    print("=== TAXONOMY DIAGNOSIS ===")
    if edge_filter.predicates is not None:
        print(f"Predicate filter: {', '.join(edge_filter.as_list())}")
    print()

    print("1. SIZE")
    print(f"   Nodes: {summary['num_nodes']:,}")
    print(f"   Edges (filtered): {summary['num_edges']:,}")
    for pred, count in summary["predicates"]:
        print(f"      {pred}: {count:,}")
    print()

    print("2. SHAPE")
    print(f"   Roots: {len(summary['roots']):,}")
    for root in summary["roots"][:10]:
        print(f"      {root}")
    print(f"   Leaves: {len(summary['leaves']):,}")
    print(f"   Isolated nodes: {len(summary['isolated']):,}")
    print(f"   Nodes with several parents: {summary['multi_parent_nodes']:,}")
    print()

    print("3. DEPTH")
    print(f"   Max depth: {summary['max_depth']}")
    for depth, count in summary["depth_distribution"].items():
        print(f"      depth {depth}: {count:,} nodes")
    print()

    print("4. HUBS (most children)")
    for rank, (node_id, count) in enumerate(summary["top_hubs"], 1):
        print(f"   {rank}. {node_id} ({count:,} children)")
    print()

    print("5. RECOMMENDATIONS")
    if len(summary["roots"]) > 1:
        print("   ⚠️  Several roots: concepts in different trees never share an LCA")
    if summary["isolated"]:
        print("   ℹ️  Isolated nodes score 0 against everything")
    if summary["max_depth"] > 0:
        print(f"   Use max_depth={summary['max_depth']} for Resnik edge and Leacock-Chodorow")
