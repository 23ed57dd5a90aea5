"""
Topology snapshot export and import.

Document shape (JSON)::

    {
      "nodes": [{"id": "A", "type": "endpoint", "x": 10.0, "y": 20.0}, ...],
      "edges": [{"source": {"id": "A", "type": "endpoint"},
                 "target": {"id": "B", "type": "repeater"},
                 "value": 5.0}, ...]
    }

x/y are renderer-owned and optional. Edge endpoints may also be bare id
strings. Both directions of a link may be listed; equal-cost mirrors
collapse into one link.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
import json
import logging

from algorithms import DijkstraEngine
from errors import SnapshotError, TopologyError
from links import canonical_pair
from nodes import Node, NodeKind
from topology_store import TopologyStore

logger = logging.getLogger(__name__)

EMPTY_SNAPSHOT: Dict[str, List[Any]] = {"nodes": [], "edges": []}


def _node_entry(node: Node) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"id": node.id, "type": node.kind.value}
    if node.position is not None:
        entry["x"], entry["y"] = node.position
    return entry


def snapshot_from_store(store: TopologyStore, include_mirrors: bool = False) -> Dict[str, Any]:
    """
    Export store as a snapshot document.

    Each undirected link is written once (low id -> high id) unless
    include_mirrors is set, in which case the reverse direction follows it.
    """
    nodes = store.node_records()
    refs = {node.id: {"id": node.id, "type": node.kind.value} for node in nodes}
    edges: List[Dict[str, Any]] = []
    for link in store.links():
        edges.append(
            {"source": dict(refs[link.low_id]), "target": dict(refs[link.high_id]), "value": link.cost}
        )
        if include_mirrors:
            edges.append(
                {"source": dict(refs[link.high_id]), "target": dict(refs[link.low_id]), "value": link.cost}
            )
    return {"nodes": [_node_entry(node) for node in nodes], "edges": edges}


def _endpoint_id(value: Any, where: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) and isinstance(value.get("id"), str):
        return value["id"]
    raise SnapshotError(f"{where}: endpoint must be an id or an object with an 'id', got {value!r}")


def _position(entry: Mapping[str, Any]) -> Optional[Tuple[float, float]]:
    x, y = entry.get("x"), entry.get("y")
    if isinstance(x, (int, float)) and isinstance(y, (int, float)):
        return (float(x), float(y))
    return None


def store_from_snapshot(
    data: Mapping[str, Any], engine: Optional[DijkstraEngine] = None
) -> TopologyStore:
    """
    Build a fresh TopologyStore from a snapshot document.

    Raises:
        SnapshotError: the document is malformed or describes an invalid
            topology (duplicate ids, unknown endpoints, negative costs,
            mirrored links with different costs).
    """
    if not isinstance(data, Mapping):
        raise SnapshotError("Snapshot must be a JSON object with 'nodes' and 'edges'.")
    raw_nodes = data.get("nodes", [])
    raw_edges = data.get("edges", [])
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise SnapshotError("Snapshot 'nodes' and 'edges' must be lists.")

    store = TopologyStore(engine)
    for idx, entry in enumerate(raw_nodes):
        where = f"nodes[{idx}]"
        if not isinstance(entry, Mapping) or not isinstance(entry.get("id"), str):
            raise SnapshotError(f"{where}: node must be an object with a string 'id'.")
        try:
            kind = NodeKind.parse(entry.get("type", ""))
        except ValueError as exc:
            raise SnapshotError(f"{where}: unknown node type {entry.get('type')!r}.") from exc
        try:
            store.add_node(entry["id"], kind, _position(entry))
        except TopologyError as exc:
            raise SnapshotError(f"{where}: {exc}") from exc

    for idx, entry in enumerate(raw_edges):
        where = f"edges[{idx}]"
        if not isinstance(entry, Mapping):
            raise SnapshotError(f"{where}: edge must be an object.")
        a = _endpoint_id(entry.get("source"), where)
        b = _endpoint_id(entry.get("target"), where)
        cost = entry.get("value")
        existing = store.link_between(a, b)
        if existing is not None:
            if existing.cost != cost:
                raise SnapshotError(
                    f"{where}: link {canonical_pair(a, b)} listed with costs {existing.cost} and {cost!r}."
                )
            continue
        try:
            store.add_link(a, b, cost)
        except TopologyError as exc:
            raise SnapshotError(f"{where}: {exc}") from exc

    logger.debug("parsed snapshot with %d node(s), %d link(s)", len(store), len(store.links()))
    return store


def dumps(store: TopologyStore, include_mirrors: bool = False, indent: int = 2) -> str:
    return json.dumps(snapshot_from_store(store, include_mirrors), indent=indent)


def loads(text: str, engine: Optional[DijkstraEngine] = None) -> TopologyStore:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Snapshot is not valid JSON: {exc}") from exc
    return store_from_snapshot(data, engine)


def write_snapshot(store: TopologyStore, path: Path, include_mirrors: bool = False) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(store, include_mirrors))


def read_snapshot(path: Path, engine: Optional[DijkstraEngine] = None) -> TopologyStore:
    return loads(path.read_text(), engine)
