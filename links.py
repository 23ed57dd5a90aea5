"""
Undirected weighted link keyed by a canonicalised node pair.
"""

from dataclasses import dataclass
from typing import Tuple


def canonical_pair(a: str, b: str) -> Tuple[str, str]:
    """Order an unordered pair so {a, b} and {b, a} share one key."""
    return (a, b) if a <= b else (b, a)


@dataclass(frozen=True)
class Link:
    """
    Single undirected link. low_id <= high_id always holds.
    """

    low_id: str
    high_id: str
    cost: float

    @classmethod
    def between(cls, a: str, b: str, cost: float) -> "Link":
        low, high = canonical_pair(a, b)
        return cls(low, high, cost)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.low_id, self.high_id)

    def other(self, node_id: str) -> str:
        """Endpoint opposite node_id."""
        return self.high_id if node_id == self.low_id else self.low_id

    def touches(self, node_id: str) -> bool:
        return node_id in (self.low_id, self.high_id)
