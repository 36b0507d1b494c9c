"""Edge-filtered BFS primitives over a taxonomy.

Every function takes a graph exposing ``has_node``, ``outgoing_edges`` and
``incoming_edges`` plus an optional predicate filter (a label, a list of
labels, or a ``PredicateFilter``). None of them raise for unknown nodes or
disconnected components: "not found" comes back as ``None``, ``[]`` or 0.

Edge direction follows the taxonomy convention child -> parent, so
"outgoing" means towards more general concepts.
"""

from collections import deque
from typing import Optional

from taxosim.filters import PredicateFilter


def bfs_shortest_path(graph, source, target, predicates=None) -> Optional[list]:
    """Shortest path between two nodes, ignoring edge direction.

    Returns the node sequence from ``source`` to ``target`` (``[source]``
    when they are equal) or None if either node is missing or no path
    exists under the filter. Ties go to the first neighbor enumerated:
    outgoing edges before incoming ones, each in store order.
    """
    if not graph.has_node(source) or not graph.has_node(target):
        return None

    edge_filter = PredicateFilter.coerce(predicates)

    visited = {source}
    parent = {}
    queue = deque([source])

    while queue:
        current = queue.popleft()

        if current == target:
            path = [target]
            while path[-1] != source:
                path.append(parent[path[-1]])
            path.reverse()
            return path

        for neighbor, _pred in (
            edge_filter.outgoing(graph, current) + edge_filter.incoming(graph, current)
        ):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            parent[neighbor] = current
            queue.append(neighbor)

    return None


def shortest_path_length(graph, source, target, predicates=None) -> Optional[int]:
    """Number of edges on the undirected shortest path, or None."""
    path = bfs_shortest_path(graph, source, target, predicates)
    return len(path) - 1 if path is not None else None


def _forward_bfs(graph, node, edge_filter):
    """Yield (node, depth) in BFS order following outgoing edges only."""
    visited = {node}
    queue = deque([(node, 0)])

    while queue:
        current, depth = queue.popleft()
        yield current, depth

        for neighbor, _pred in edge_filter.outgoing(graph, current):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            queue.append((neighbor, depth + 1))


def rooted_depth(graph, node, predicates=None) -> int:
    """Depth of a node: the largest BFS distance reachable via outgoing edges.

    A node without outgoing edges (a root) has depth 0, and so does a node
    that is not in the graph.
    """
    if not graph.has_node(node):
        return 0

    edge_filter = PredicateFilter.coerce(predicates)
    max_depth = 0
    for _current, depth in _forward_bfs(graph, node, edge_filter):
        max_depth = max(max_depth, depth)
    return max_depth


def ancestors(graph, node, predicates=None) -> list:
    """Forward closure of a node in BFS order, the node itself first."""
    if not graph.has_node(node):
        return []
    edge_filter = PredicateFilter.coerce(predicates)
    return [current for current, _depth in _forward_bfs(graph, node, edge_filter)]


def find_lcas(graph, node1, node2, predicates=None) -> list:
    """Common ancestors of two nodes.

    Every node reached by a forward BFS from ``node2`` that also lies in the
    forward closure of ``node1`` is reported, in discovery order. No
    minimality pruning is done, so ancestors of the nearest common ancestor
    appear too; callers pick the best-scoring candidate. A node counts as
    its own ancestor, so ``find_lcas(g, a, a)`` always contains ``a``.
    """
    if not graph.has_node(node1) or not graph.has_node(node2):
        return []

    edge_filter = PredicateFilter.coerce(predicates)
    closure1 = {current for current, _depth in _forward_bfs(graph, node1, edge_filter)}

    return [
        current
        for current, _depth in _forward_bfs(graph, node2, edge_filter)
        if current in closure1
    ]


def path_length_to_ancestor(graph, node, ancestor, predicates=None) -> Optional[int]:
    """Directed distance from ``node`` up to ``ancestor``.

    0 when they are the same node, None when ``ancestor`` cannot be reached
    via outgoing edges or ``node`` is missing.
    """
    if not graph.has_node(node):
        return None

    edge_filter = PredicateFilter.coerce(predicates)
    for current, depth in _forward_bfs(graph, node, edge_filter):
        if current == ancestor:
            return depth
    return None


def max_taxonomy_depth(graph, predicates=None) -> int:
    """Largest rooted depth over every node in the graph.

    Costs one BFS per node; meant for deriving ``max_depth`` once per
    taxonomy, not per query.
    """
    edge_filter = PredicateFilter.coerce(predicates)
    deepest = 0
    for node in graph.node_ids():
        deepest = max(deepest, rooted_depth(graph, node, edge_filter))
    return deepest
