"""
Topology store: nodes plus weighted undirected links.

Each undirected link is held once, keyed by its canonical (low, high) pair;
per-node adjacency is derived on demand, so the two directions of a link can
never disagree on cost. Mutations validate fully before touching state, so a
rejected operation leaves the store unchanged.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
import logging
import math
import threading

from algorithms import DijkstraEngine
from dijkstra_engine import SimpleDijkstraEngine, reconstruct_path
from errors import (
    DuplicateLink,
    DuplicateNode,
    InvalidCost,
    LinkNotFound,
    NodeNotFound,
    SelfLink,
    UnknownNode,
)
from events import (
    LinkAdded,
    LinkModified,
    LinkRemoved,
    Listener,
    ListenerRegistry,
    NodeAdded,
    NodeRemoved,
    TopologyReplaced,
)
from graph import Graph
from links import Link, canonical_pair
from nodes import Node, NodeKind

logger = logging.getLogger(__name__)


def check_cost(cost: object) -> float:
    """Return cost as a float, or raise InvalidCost if it is not a finite non-negative number."""
    if isinstance(cost, bool) or not isinstance(cost, (int, float)):
        raise InvalidCost(cost)
    if math.isnan(cost) or math.isinf(cost) or cost < 0:
        raise InvalidCost(cost)
    return float(cost)


class TopologyStore(Graph):
    """
    In-memory node/link store with a shortest-path oracle.

    Mutating calls are serialised by an internal lock; listeners registered
    through subscribe() are notified in order after each successful mutation.
    """

    def __init__(self, engine: Optional[DijkstraEngine] = None) -> None:
        self._nodes: Dict[str, Node] = {}
        self._links: Dict[Tuple[str, str], Link] = {}
        self._engine: DijkstraEngine = engine or SimpleDijkstraEngine()
        self._listeners = ListenerRegistry()
        self._lock = threading.RLock()

    @property
    def lock(self):
        """Re-entrant lock serialising mutations; hold it to make check-then-act sequences atomic."""
        return self._lock

    # --- Listener registration ---------------------------------------------

    def subscribe(self, listener: Listener):
        """Register a change listener; returns an unsubscribe callable."""
        return self._listeners.subscribe(listener)

    # --- Node mutation -----------------------------------------------------

    def add_node(
        self,
        node_id: str,
        kind: NodeKind | str,
        position: Optional[Tuple[float, float]] = None,
    ) -> Node:
        node = Node(node_id, NodeKind.parse(kind), position)
        with self._lock:
            if node_id in self._nodes:
                raise DuplicateNode(node_id)
            self._nodes[node_id] = node
            logger.info("added %s node %s", node.kind.value, node_id)
            self._listeners.publish(NodeAdded(node))
        return node

    def remove_node(self, node_id: str) -> Node:
        """Remove node_id and every link incident to it."""
        with self._lock:
            node = self._nodes.get(node_id)
            if node is None:
                raise NodeNotFound(node_id)
            incident = [link for link in self._links.values() if link.touches(node_id)]
            for link in incident:
                del self._links[link.key]
            del self._nodes[node_id]
            logger.info("removed node %s and %d incident link(s)", node_id, len(incident))
            self._listeners.publish(NodeRemoved(node, tuple(incident)))
        return node

    def set_position(self, node_id: str, position: Optional[Tuple[float, float]]) -> Node:
        """Record renderer-owned coordinates; not announced to listeners."""
        with self._lock:
            node = self._nodes.get(node_id)
            if node is None:
                raise NodeNotFound(node_id)
            node = node.with_position(position)
            self._nodes[node_id] = node
        return node

    # --- Link mutation -----------------------------------------------------

    def add_link(self, a: str, b: str, cost: float) -> Link:
        with self._lock:
            for endpoint in (a, b):
                if endpoint not in self._nodes:
                    raise UnknownNode(endpoint)
            if a == b:
                raise SelfLink(a)
            if canonical_pair(a, b) in self._links:
                raise DuplicateLink(a, b)
            link = Link.between(a, b, check_cost(cost))
            self._links[link.key] = link
            logger.info("added link %s-%s cost=%s", link.low_id, link.high_id, link.cost)
            self._listeners.publish(LinkAdded(link))
        return link

    def modify_link(self, a: str, b: str, new_cost: float) -> Link:
        with self._lock:
            key = canonical_pair(a, b)
            old = self._links.get(key)
            if old is None:
                raise LinkNotFound(a, b)
            link = Link.between(a, b, check_cost(new_cost))
            self._links[key] = link
            logger.info(
                "modified link %s-%s cost %s -> %s", link.low_id, link.high_id, old.cost, link.cost
            )
            self._listeners.publish(LinkModified(link, old.cost))
        return link

    def remove_link(self, a: str, b: str) -> Optional[Link]:
        """Remove the link between a and b; returns None if there was none."""
        with self._lock:
            link = self._links.pop(canonical_pair(a, b), None)
            if link is None:
                logger.debug("remove_link %s-%s: no such link", a, b)
                return None
            logger.info("removed link %s-%s", link.low_id, link.high_id)
            self._listeners.publish(LinkRemoved(link))
        return link

    # --- Whole-topology mutation -------------------------------------------

    def replace_with(self, other: "TopologyStore") -> None:
        """
        Adopt other's nodes and links in one step (import / clear).
        """
        with self._lock:
            self._nodes = dict(other._nodes)
            self._links = dict(other._links)
            logger.info(
                "topology replaced: %d node(s), %d link(s)", len(self._nodes), len(self._links)
            )
            self._listeners.publish(TopologyReplaced(len(self._nodes), len(self._links)))

    def clear(self) -> None:
        self.replace_with(TopologyStore())

    # --- Queries -----------------------------------------------------------

    def nodes(self) -> Iterable[str]:
        with self._lock:
            return list(self._nodes)

    def outgoing(self, node_id: str) -> Mapping[str, float]:
        with self._lock:
            return {
                link.other(node_id): link.cost
                for link in self._links.values()
                if link.touches(node_id)
            }

    def node_records(self) -> List[Node]:
        with self._lock:
            return list(self._nodes.values())

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def links(self) -> List[Link]:
        with self._lock:
            return list(self._links.values())

    def link_between(self, a: str, b: str) -> Optional[Link]:
        return self._links.get(canonical_pair(a, b))

    def has_link(self, a: str, b: str) -> bool:
        return canonical_pair(a, b) in self._links

    def degree(self, node_id: str) -> int:
        with self._lock:
            return sum(1 for link in self._links.values() if link.touches(node_id))

    def shortest_path_cost(self, a: str, b: str) -> Optional[float]:
        """
        Minimum total link cost between a and b.

        Returns None when b is unreachable from a or either id is unknown.
        """
        with self._lock:
            if a not in self._nodes or b not in self._nodes:
                return None
            dist = self._engine.shortest_path_costs(self, a)
        return dist.get(b)

    def shortest_path(self, a: str, b: str) -> Optional[List[str]]:
        """Node ids along a cheapest a -> b route, or None if unreachable."""
        with self._lock:
            if a not in self._nodes or b not in self._nodes:
                return None
            _, prev = self._engine.shortest_paths(self, a)
        return reconstruct_path(prev, a, b)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self.node_records())

    def __len__(self) -> int:
        return len(self._nodes)
