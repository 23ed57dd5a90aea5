"""
Read-only weighted graph abstraction.

Nodes are addressed by id. Adjacency is derived from undirected links, so
outgoing(a)[b] == outgoing(b)[a] always holds.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping


class Graph(ABC):
    """Weighted graph over node ids."""

    @abstractmethod
    def nodes(self) -> Iterable[str]:
        """Return all node ids in insertion order."""
        raise NotImplementedError

    @abstractmethod
    def outgoing(self, node_id: str) -> Mapping[str, float]:
        """
        Neighbours and link costs for a given node.

        Returns: dict[str, float]; empty for unknown ids.
        """
        raise NotImplementedError
