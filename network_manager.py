"""
Network manager: the operations a user drives against the topology.

Wraps a TopologyStore with the edge validator for link additions and cost
changes, snapshot import/export, and the interpret-then-compile pipeline
that turns a backend entanglement result into a highlight schedule.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple, Union
import json
import logging

from edge_validator import EdgeValidator
from errors import DuplicateLink, LinkNotFound, SnapshotError, TriangleInequalityViolation
from highlight_config import HighlightConfig
from links import Link
from nodes import Node, NodeKind
from outcomes import ConnectionResult, Segment, SegmentKind, interpret_outcomes
from schedule_compiler import HighlightInstruction, compile_schedule, total_duration_ms
from snapshot import EMPTY_SNAPSHOT, snapshot_from_store, store_from_snapshot
from topology_store import TopologyStore, check_cost

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HighlightPlan:
    """Everything derived from one entanglement result."""

    path: Tuple[str, ...]
    segments: Tuple[Segment, ...]
    instructions: Tuple[HighlightInstruction, ...]
    path_cost: Optional[float]

    @property
    def duration_ms(self) -> int:
        return total_duration_ms(self.instructions)

    def count(self, kind: SegmentKind) -> int:
        return sum(1 for seg in self.segments if seg.kind is kind)


class NetworkManager:
    def __init__(
        self,
        store: Optional[TopologyStore] = None,
        config: Optional[HighlightConfig] = None,
    ) -> None:
        self.store = store if store is not None else TopologyStore()
        self.config = config or HighlightConfig()
        self.validator = EdgeValidator(self.store)

    # --- Nodes -------------------------------------------------------------

    def add_node(self, node_id: str, kind: NodeKind | str = NodeKind.ENDPOINT) -> Node:
        return self.store.add_node(node_id, kind)

    def remove_node(self, node_id: str) -> Node:
        return self.store.remove_node(node_id)

    # --- Links -------------------------------------------------------------

    def _require_valid(self, a: str, b: str, cost: float) -> None:
        if not self.validator.is_proposal_valid(a, b, cost):
            shortest = self.store.shortest_path_cost(a, b)
            logger.warning("link %s-%s cost=%s violates the triangle inequality", a, b, cost)
            raise TriangleInequalityViolation(a, b, cost, shortest if shortest is not None else cost)

    def add_link(self, a: str, b: str, cost: float) -> Link:
        """Add a link unless a cheaper route between a and b already exists."""
        with self.store.lock:
            if self.store.has_link(a, b):
                raise DuplicateLink(a, b)
            check_cost(cost)
            self._require_valid(a, b, cost)
            return self.store.add_link(a, b, cost)

    def modify_link(self, a: str, b: str, new_cost: float) -> Link:
        with self.store.lock:
            if not self.store.has_link(a, b):
                raise LinkNotFound(a, b)
            check_cost(new_cost)
            self._require_valid(a, b, new_cost)
            return self.store.modify_link(a, b, new_cost)

    def remove_link(self, a: str, b: str) -> Optional[Link]:
        return self.store.remove_link(a, b)

    def path_cost(self, path: Sequence[str]) -> Optional[float]:
        """Sum of link costs along path; None if any hop has no link."""
        total = 0.0
        for a, b in zip(path, path[1:]):
            link = self.store.link_between(a, b)
            if link is None:
                return None
            total += link.cost
        return total

    # --- Snapshots ---------------------------------------------------------

    def import_network(self, snapshot: Union[str, Mapping[str, Any]]) -> None:
        """
        Replace the topology with a snapshot (JSON text or parsed document).

        The current topology is untouched if the snapshot is rejected.
        """
        if isinstance(snapshot, str):
            try:
                snapshot = json.loads(snapshot)
            except json.JSONDecodeError as exc:
                raise SnapshotError(f"Snapshot is not valid JSON: {exc}") from exc
        fresh = store_from_snapshot(snapshot)
        self.store.replace_with(fresh)

    def export_network(self, include_mirrors: bool = False) -> str:
        return json.dumps(snapshot_from_store(self.store, include_mirrors), indent=2)

    def clear_network(self) -> None:
        self.import_network(EMPTY_SNAPSHOT)

    # --- Entanglement results ----------------------------------------------

    def plan_highlight(self, result: Union[ConnectionResult, Mapping[str, Any]]) -> HighlightPlan:
        if not isinstance(result, ConnectionResult):
            result = ConnectionResult.from_dict(result)
        segments = interpret_outcomes(result)
        instructions = compile_schedule(
            segments,
            timing=self.config.timing,
            palette=self.config.palette,
            known_nodes=self.store,
        )
        plan = HighlightPlan(
            path=result.path,
            segments=tuple(segments),
            instructions=instructions,
            path_cost=self.path_cost(result.path) if result.path else None,
        )
        logger.info(
            "planned %d instruction(s) over %d segment(s), duration %d ms",
            len(plan.instructions),
            len(plan.segments),
            plan.duration_ms,
        )
        return plan
