"""Load taxonomy nodes and edges into taxosim.

Two-pass loader:

Pass 1: Stream the edge JSONL to collect vocabularies (node IDs, predicates,
        edge count). Node JSONL adds isolated nodes and node properties.
Pass 2: Stream the edge JSONL again, converting each edge to integer indices
        stored in pre-allocated numpy arrays, then hand them to CSRGraph.

Edge lines look like ``{"subject": "dog", "predicate": "is-a", "object":
"mammal"}`` with the subject being the more specific concept.
"""

import json

import numpy as np

from taxosim.filters import PredicateFilter
from taxosim.graph import CSRGraph


class TaxonomyLoadError(ValueError):
    """Raised when a JSONL line cannot be read as a node or an edge."""


def _iter_jsonl(path, required):
    """Yield (line_number, record) for every non-blank line of a JSONL file."""
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                raise TaxonomyLoadError(
                    f"{path}:{line_number}: invalid JSON ({e.msg})"
                ) from e
            if not isinstance(data, dict):
                raise TaxonomyLoadError(f"{path}:{line_number}: expected an object")
            missing = [field for field in required if field not in data]
            if missing:
                raise TaxonomyLoadError(
                    f"{path}:{line_number}: missing field(s) {', '.join(missing)}"
                )
            not_strings = [field for field in required if not isinstance(data[field], str)]
            if not_strings:
                raise TaxonomyLoadError(
                    f"{path}:{line_number}: field(s) {', '.join(not_strings)} must be strings"
                )
            yield line_number, data


def _read_nodes(node_jsonl_path, verbose):
    """Read node properties keyed by node ID."""
    if verbose:
        print(f"Reading node properties from {node_jsonl_path}...")
    node_properties = {}
    for _line_number, node_data in _iter_jsonl(node_jsonl_path, ("id",)):
        props = {key: value for key, value in node_data.items() if key != "id"}
        node_properties[node_data["id"]] = props
    if verbose:
        print(f"  Loaded properties for {len(node_properties):,} nodes")
    return node_properties


def build_graph_from_jsonl(
    edge_jsonl_path, node_jsonl_path=None, predicates=None, verbose=True
):
    """Build a CSR graph from JSONL files.

    Args:
        edge_jsonl_path: Edge file, one ``subject``/``predicate``/``object``
            record per line.
        node_jsonl_path: Optional node file, one record with an ``id`` per
            line. Every listed node is added even without edges.
        predicates: Optional whitelist; edges with other predicates are
            dropped at load time.
        verbose: Print progress.

    Raises:
        FileNotFoundError: if a file does not exist.
        TaxonomyLoadError: on malformed lines.
    """
    edge_jsonl_path = str(edge_jsonl_path)
    node_jsonl_path = str(node_jsonl_path) if node_jsonl_path else None
    edge_filter = PredicateFilter.coerce(predicates)
    edge_fields = ("subject", "predicate", "object")

    # =================================================================
    # Pass 1: Vocabulary collection
    # =================================================================
    if verbose:
        print(f"Pass 1: Collecting vocabularies from {edge_jsonl_path}...")

    node_ids = set()
    predicate_names = set()
    edge_count = 0
    skipped = 0

    for _line_number, data in _iter_jsonl(edge_jsonl_path, edge_fields):
        if not edge_filter.allows(data["predicate"]):
            skipped += 1
            continue
        node_ids.add(data["subject"])
        node_ids.add(data["object"])
        predicate_names.add(data["predicate"])
        edge_count += 1

    node_properties = {}
    if node_jsonl_path:
        node_properties = _read_nodes(node_jsonl_path, verbose)
        node_ids.update(node_properties)

    if verbose:
        print(f"  Found {len(node_ids):,} unique nodes, {len(predicate_names):,} "
              f"predicates, {edge_count:,} edges ({skipped:,} filtered out)")

    node_id_to_idx = {nid: idx for idx, nid in enumerate(sorted(node_ids))}
    predicate_to_idx = {pred: idx for idx, pred in enumerate(sorted(predicate_names))}

    # =================================================================
    # Pass 2: Integer edge arrays
    # =================================================================
    if verbose:
        print(f"Pass 2: Building edge arrays ({edge_count:,} edges)...")

    src_indices = np.empty(edge_count, dtype=np.int32)
    dst_indices = np.empty(edge_count, dtype=np.int32)
    pred_indices = np.empty(edge_count, dtype=np.int32)

    i = 0
    for _line_number, data in _iter_jsonl(edge_jsonl_path, edge_fields):
        if not edge_filter.allows(data["predicate"]):
            continue
        src_indices[i] = node_id_to_idx[data["subject"]]
        dst_indices[i] = node_id_to_idx[data["object"]]
        pred_indices[i] = predicate_to_idx[data["predicate"]]
        i += 1

    graph = CSRGraph(
        len(node_id_to_idx),
        list(zip(src_indices.tolist(), dst_indices.tolist())),
        pred_indices.tolist(),
        node_id_to_idx,
        predicate_to_idx,
        node_properties={
            node_id_to_idx[nid]: props for nid, props in node_properties.items()
        },
        verbose=verbose,
    )

    if verbose:
        print("\nGraph statistics:")
        print(f"  Nodes: {graph.num_nodes:,}")
        print(f"  Edges: {graph.num_edges:,}")
        print(f"  Unique predicates: {len(predicate_to_idx):,}")
        if graph.num_nodes:
            degrees = np.diff(graph.fwd_offsets)
            print(f"  Avg out-degree: {np.mean(degrees):.1f}")
            print(f"  Max out-degree: {np.max(degrees)}")

    return graph
