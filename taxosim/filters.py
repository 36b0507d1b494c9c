"""Edge predicate filtering shared by every traversal."""

from dataclasses import dataclass
from typing import Iterable, Optional, Union


PredicateOption = Union[None, str, Iterable[str], "PredicateFilter"]


@dataclass(frozen=True)
class PredicateFilter:
    """Whitelist of edge predicates.

    ``predicates=None`` lets every edge through. An empty whitelist lets
    nothing through.
    """

    predicates: Optional[frozenset] = None

    @classmethod
    def coerce(cls, option: PredicateOption) -> "PredicateFilter":
        """Build a filter from a single label, a list of labels, or None."""
        if isinstance(option, PredicateFilter):
            return option
        if option is None:
            return cls()
        if isinstance(option, str):
            return cls(frozenset([option]))
        return cls(frozenset(option))

    def allows(self, predicate) -> bool:
        """Check whether an edge with this predicate may be traversed."""
        if self.predicates is None:
            return True
        return predicate in self.predicates

    def outgoing(self, graph, node_id):
        """Outgoing (neighbor, predicate) edges that pass the filter."""
        return [
            (neighbor, predicate)
            for neighbor, predicate in graph.outgoing_edges(node_id)
            if self.allows(predicate)
        ]

    def incoming(self, graph, node_id):
        """Incoming (neighbor, predicate) edges that pass the filter."""
        return [
            (neighbor, predicate)
            for neighbor, predicate in graph.incoming_edges(node_id)
            if self.allows(predicate)
        ]

    def as_list(self):
        """Sorted whitelist, or None when unfiltered."""
        if self.predicates is None:
            return None
        return sorted(self.predicates)
