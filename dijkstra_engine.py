"""
Heap-based DijkstraEngine implementation.

Uses Python's heapq to compute single-source shortest paths over any Graph
implementation that satisfies the Graph interface.
"""

from typing import Dict, List, Optional
import heapq
import math

from algorithms import DijkstraEngine
from graph import Graph


class SimpleDijkstraEngine(DijkstraEngine):
    """
    Single-source Dijkstra using a binary heap.

    Ties between equally distant candidates are broken by node insertion
    order (the order of graph.nodes()), so results and predecessor chains are
    reproducible.

    Complexity:
        O(E log V) over the nodes reachable from the source.
    """

    def shortest_path_costs(self, graph: Graph, source: str) -> Dict[str, float]:
        """
        Compute only the cost map for all reachable nodes from source.
        """
        dist, _ = self.shortest_paths(graph, source)
        return dist

    def shortest_paths(
        self, graph: Graph, source: str
    ) -> tuple[Dict[str, float], Dict[str, str]]:
        """
        Dijkstra variant that also records predecessors for path reconstruction.

        It returns the distance map (dest -> cost from source) plus a
        predecessor map that lets you walk back from any reachable node to
        the source. The predecessor map omits the source itself because it
        has no parent.
        """
        order = {node_id: idx for idx, node_id in enumerate(graph.nodes())}
        if source not in order:
            return {}, {}

        dist: Dict[str, float] = {source: 0.0}
        prev: Dict[str, str] = {}
        visited: set[str] = set()
        # priority queue of (distance, insertion rank, node)
        pq = [(0.0, order[source], source)]

        while pq:
            d_u, _, u = heapq.heappop(pq)
            if u in visited or d_u != dist.get(u, math.inf):
                continue
            visited.add(u)

            for v, w in graph.outgoing(u).items():
                if v in visited:
                    continue
                alt = d_u + w
                if alt < dist.get(v, math.inf):
                    dist[v] = alt
                    prev[v] = u
                    heapq.heappush(pq, (alt, order.get(v, len(order)), v))

        return dist, prev


def reconstruct_path(prev: Dict[str, str], source: str, dest: str) -> Optional[List[str]]:
    """
    Walk the predecessor map back from dest to source.

    Returns None when dest was not reached.
    """
    if dest == source:
        return [source]
    if dest not in prev:
        return None
    path = [dest]
    while path[-1] != source:
        parent = prev.get(path[-1])
        if parent is None:
            return None
        path.append(parent)
    path.reverse()
    return path
