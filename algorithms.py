"""
Path-cost engine interface used by the topology store.

The store answers shortest-path queries through an injected engine, so the
search strategy can be swapped (or stubbed in tests) without touching the
node/link bookkeeping.
"""

from abc import ABC, abstractmethod
from typing import Dict

from graph import Graph


class DijkstraEngine(ABC):
    """
    Single-source search over non-negative link costs.

    Implementations must be deterministic for a given graph: equal-cost
    candidates are settled in the graph's node insertion order.
    """

    @abstractmethod
    def shortest_path_costs(self, graph: Graph, source: str) -> Dict[str, float]:
        """
        Cheapest total link cost from source to every node it can reach.

        The source maps to 0.0. Nodes in another component are left out,
        and an id the graph does not know yields an empty map.
        """
        raise NotImplementedError

    @abstractmethod
    def shortest_paths(
        self, graph: Graph, source: str
    ) -> tuple[Dict[str, float], Dict[str, str]]:
        """
        Same cost map, plus the parent of each reached node on its cheapest
        route (the source has no entry). Walk it with
        dijkstra_engine.reconstruct_path to recover the hops.
        """
        raise NotImplementedError
