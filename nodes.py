"""
Node model for the quantum-network topology.

Nodes are identified by a unique string id. Position is owned by whatever
renderer draws the network; the topology only carries it through.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class NodeKind(Enum):
    """Role a node plays in the network."""

    ENDPOINT = "endpoint"
    REPEATER = "repeater"

    @classmethod
    def parse(cls, value: "str | NodeKind") -> "NodeKind":
        if isinstance(value, NodeKind):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class Node:
    """
    A network endpoint or repeater.

    position is an opaque (x, y) pair round-tripped for the renderer.
    """

    id: str
    kind: NodeKind
    position: Optional[Tuple[float, float]] = None

    def with_position(self, position: Optional[Tuple[float, float]]) -> "Node":
        return Node(self.id, self.kind, position)
