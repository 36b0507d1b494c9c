"""Main taxosim CSR graph class."""

from typing import Iterable, Optional, Protocol

import numpy as np


class TaxonomyStore(Protocol):
    """Graph capability the traversal code depends on.

    Any adjacency-list, adjacency-map or CSR-backed structure works as long
    as it answers these three queries with an enumeration order that does
    not change between calls.
    """

    def has_node(self, node_id: str) -> bool:
        ...

    def outgoing_edges(self, node_id: str) -> list[tuple[str, str]]:
        ...

    def incoming_edges(self, node_id: str) -> list[tuple[str, str]]:
        ...


class CSRGraph:
    """
    Compressed Sparse Row graph representation for fast neighbor lookups.

    Maintains two CSR structures:
    - Forward: node -> outgoing edges (which parents does this concept have?)
    - Reverse: node -> incoming edges (which children point at this concept?)

    Edges are sorted by (src, dst, predicate) so neighbor enumeration is
    stable for the lifetime of the graph. The graph is never mutated after
    construction.
    """

    def __init__(
        self,
        num_nodes,
        edges,
        edge_predicates,
        node_id_to_idx,
        predicate_to_idx,
        node_properties=None,
        verbose=False,
    ):
        """
        Args:
            num_nodes: Total number of unique nodes
            edges: List of (src_idx, dst_idx) tuples using integer indices
            edge_predicates: List of predicate IDs (parallel to edges list)
            node_id_to_idx: Dict mapping original node IDs to integer indices
            predicate_to_idx: Dict mapping predicate strings to integer IDs
            node_properties: Dict mapping node_idx -> properties dict
            verbose: Print build progress
        """
        self.num_nodes = num_nodes
        self.node_id_to_idx = node_id_to_idx
        self.idx_to_node_id = {idx: nid for nid, idx in node_id_to_idx.items()}
        self.node_properties = node_properties or {}

        # Predicate vocabulary
        self.predicate_to_idx = predicate_to_idx
        self.id_to_predicate = {idx: pred for pred, idx in predicate_to_idx.items()}

        if verbose:
            print("Building forward CSR...")
        self._build_forward_csr(edges, edge_predicates)

        if verbose:
            print("Building reverse CSR...")
        self._build_reverse_csr(edges, edge_predicates)

    @classmethod
    def from_edges(
        cls,
        triples: Iterable[tuple[str, str, str]],
        nodes: Optional[Iterable[str]] = None,
        node_properties: Optional[dict] = None,
        verbose=False,
    ):
        """Build a graph from (subject, object, predicate) string triples.

        ``nodes`` registers extra node IDs that may have no edges at all.
        ``node_properties`` maps node IDs (not indices) to property dicts.
        """
        triples = list(triples)

        node_ids = set(nodes or [])
        predicates = set()
        for subject, obj, predicate in triples:
            node_ids.add(subject)
            node_ids.add(obj)
            predicates.add(predicate)
        if node_properties:
            node_ids.update(node_properties)

        node_id_to_idx = {nid: idx for idx, nid in enumerate(sorted(node_ids))}
        predicate_to_idx = {pred: idx for idx, pred in enumerate(sorted(predicates))}

        edges = [(node_id_to_idx[s], node_id_to_idx[o]) for s, o, _ in triples]
        edge_predicates = [predicate_to_idx[p] for _, _, p in triples]

        props = {
            node_id_to_idx[nid]: dict(values)
            for nid, values in (node_properties or {}).items()
        }

        return cls(
            len(node_id_to_idx),
            edges,
            edge_predicates,
            node_id_to_idx,
            predicate_to_idx,
            node_properties=props,
            verbose=verbose,
        )

    def _build_forward_csr(self, edges, edge_predicates):
        """Build forward adjacency list (child -> parents)."""
        order = sorted(
            range(len(edges)),
            key=lambda i: (edges[i][0], edges[i][1], int(edge_predicates[i])),
        )

        self.fwd_targets = np.array([edges[i][1] for i in order], dtype=np.int32)
        self.fwd_predicates = np.array(
            [edge_predicates[i] for i in order], dtype=np.int32
        )
        sources = np.array([edges[i][0] for i in order], dtype=np.int32)

        # offsets[n]..offsets[n + 1] spans the edges of node n
        self.fwd_offsets = np.searchsorted(
            sources, np.arange(self.num_nodes + 1)
        ).astype(np.int64)

    def _build_reverse_csr(self, edges, edge_predicates):
        """Build reverse adjacency list (parent -> children)."""
        order = sorted(
            range(len(edges)),
            key=lambda i: (edges[i][1], edges[i][0], int(edge_predicates[i])),
        )

        self.rev_sources = np.array([edges[i][0] for i in order], dtype=np.int32)
        self.rev_predicates = np.array(
            [edge_predicates[i] for i in order], dtype=np.int32
        )
        targets = np.array([edges[i][1] for i in order], dtype=np.int32)

        self.rev_offsets = np.searchsorted(
            targets, np.arange(self.num_nodes + 1)
        ).astype(np.int64)

    # ------------------------------------------------------------------
    # Capability interface (string IDs)
    # ------------------------------------------------------------------

    def has_node(self, node_id):
        """Return True if ``node_id`` is part of the graph."""
        return node_id in self.node_id_to_idx

    def outgoing_edges(self, node_id):
        """Outgoing edges of a node as (parent_id, predicate) tuples.

        Unknown node IDs have no edges.
        """
        node_idx = self.node_id_to_idx.get(node_id)
        if node_idx is None:
            return []
        return [
            (self.idx_to_node_id[target], predicate)
            for target, predicate in self.get_edges(node_idx)
        ]

    def incoming_edges(self, node_id):
        """Incoming edges of a node as (child_id, predicate) tuples."""
        node_idx = self.node_id_to_idx.get(node_id)
        if node_idx is None:
            return []
        return [
            (self.idx_to_node_id[source], predicate)
            for source, predicate in self.get_incoming_edges(node_idx)
        ]

    def node_ids(self):
        """All node IDs in index order."""
        return [self.idx_to_node_id[idx] for idx in range(self.num_nodes)]

    @property
    def num_edges(self):
        return len(self.fwd_targets)

    # ------------------------------------------------------------------
    # Edge enumeration (integer indices)
    # ------------------------------------------------------------------

    def get_edges(self, node_idx):
        """Get all edges from a node as (neighbor_idx, predicate_str) tuples."""
        start = self.fwd_offsets[node_idx]
        end = self.fwd_offsets[node_idx + 1]

        neighbors = self.fwd_targets[start:end]
        pred_ids = self.fwd_predicates[start:end]

        return [
            (int(neighbor), self.id_to_predicate[int(pred_id)])
            for neighbor, pred_id in zip(neighbors, pred_ids)
        ]

    def get_incoming_edges(self, node_idx):
        """Get all edges into a node as (source_idx, predicate_str) tuples."""
        start = self.rev_offsets[node_idx]
        end = self.rev_offsets[node_idx + 1]

        sources = self.rev_sources[start:end]
        pred_ids = self.rev_predicates[start:end]

        return [
            (int(source), self.id_to_predicate[int(pred_id)])
            for source, pred_id in zip(sources, pred_ids)
        ]

    def get_node_id(self, node_idx):
        """Convert internal index to original node ID"""
        return self.idx_to_node_id.get(node_idx)

    # ------------------------------------------------------------------
    # Node properties
    # ------------------------------------------------------------------

    def get_node_property(self, node_id, key, default=None):
        """Get a property of a node by ID; unknown nodes give ``default``."""
        node_idx = self.node_id_to_idx.get(node_id)
        if node_idx is None:
            return default
        return self.node_properties.get(node_idx, {}).get(key, default)

    def node_names(self, node_ids):
        """Map each node ID that carries a ``name`` property to that name."""
        names = {}
        for node_id in node_ids:
            name = self.get_node_property(node_id, "name")
            if name is not None:
                names[node_id] = name
        return names

    def get_predicate_stats(self):
        """Get statistics about predicate usage"""
        pred_counts = {}
        for pred_id in self.fwd_predicates:
            pred_str = self.id_to_predicate[int(pred_id)]
            pred_counts[pred_str] = pred_counts.get(pred_str, 0) + 1

        return sorted(pred_counts.items(), key=lambda x: x[1], reverse=True)
