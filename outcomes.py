"""
Outcome interpretation for entanglement requests.

The simulation backend answers an entanglement request with the end-to-end
path it chose and an unordered list of the operations it attempted on that
path: elementary link generations between adjacent nodes, and entanglement
swaps at intermediate nodes. This module turns that record into the ordered
list of per-hop segments the schedule compiler consumes.

Interpretation is best-effort: malformed operations are logged and skipped,
never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union
import logging

logger = logging.getLogger(__name__)


class OperationType(Enum):
    LINK_GENERATION = "link_generation"
    SWAP = "swap"


SUCCESS = "success"
FAILED = "failed"


class SegmentKind(Enum):
    """Outcome attached to one elementary hop."""

    SUCCESS = "success"
    FAILED_GENERATION = "failed_generation"
    FAILED_SWAP = "failed_swap"


@dataclass(frozen=True)
class Segment:
    """One hop (source -> target) between adjacent path nodes."""

    source: str
    target: str
    kind: SegmentKind

    @property
    def endpoints(self) -> Tuple[str, str]:
        return (self.source, self.target)


@dataclass(frozen=True)
class LinkGeneration:
    """Attempt to generate an elementary link between two adjacent nodes."""

    nodes: Tuple[str, str]
    status: str

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS


@dataclass(frozen=True)
class SwapAttempt:
    """
    Entanglement swap joining two links at an intermediate node.

    inputs holds the two links being merged, each as a node pair.
    """

    inputs: Tuple[Tuple[str, str], Tuple[str, str]]
    status: str

    @property
    def failed(self) -> bool:
        return self.status == FAILED


Operation = Union[LinkGeneration, SwapAttempt]


@dataclass(frozen=True)
class ConnectionResult:
    """Backend answer to one entanglement request."""

    path: Tuple[str, ...]
    operations: Tuple[Operation, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConnectionResult":
        """
        Parse the backend's JSON record.

        Unknown or malformed operations are skipped with a warning; a missing
        path yields an empty one.
        """
        if not isinstance(data, Mapping):
            logger.warning("connection result is not a mapping: %r", data)
            return cls(())

        raw_path = data.get("path") or []
        if not isinstance(raw_path, (list, tuple)):
            logger.warning("connection result path is not a list: %r", raw_path)
            raw_path = []
        path = tuple(str(node) for node in raw_path)

        operations: List[Operation] = []
        raw_ops = data.get("operations") or []
        if not isinstance(raw_ops, (list, tuple)):
            logger.warning("connection result operations is not a list: %r", raw_ops)
            raw_ops = []
        for idx, raw in enumerate(raw_ops):
            op = _parse_operation(raw)
            if op is None:
                logger.warning("skipping malformed operation #%d: %r", idx, raw)
                continue
            operations.append(op)
        return cls(path, tuple(operations))


def _pair(value: Any) -> Optional[Tuple[str, str]]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    return (str(value[0]), str(value[1]))


def _parse_operation(raw: Any) -> Optional[Operation]:
    if not isinstance(raw, Mapping):
        return None
    try:
        op_type = OperationType(raw.get("type"))
    except ValueError:
        return None
    status = raw.get("status")
    if not isinstance(status, str):
        return None

    if op_type is OperationType.LINK_GENERATION:
        nodes = _pair(raw.get("nodes"))
        if nodes is None:
            return None
        return LinkGeneration(nodes, status)

    inputs = raw.get("inputs")
    if not isinstance(inputs, (list, tuple)) or len(inputs) != 2:
        return None
    first, second = _pair(inputs[0]), _pair(inputs[1])
    if first is None or second is None:
        return None
    return SwapAttempt((first, second), status)


def _failed_swap_segments(path: Sequence[str], swap: SwapAttempt) -> List[Segment]:
    """
    Every hop between the far ends of the two links a failed swap meant to
    merge; the whole sub-path is lost, not just the swap point.
    """
    nodes = list(path)
    try:
        i0 = nodes.index(swap.inputs[0][0])
        i1 = nodes.index(swap.inputs[1][0])
    except ValueError:
        logger.warning("failed swap %r references nodes outside path %r", swap.inputs, path)
        return []
    lo, hi = min(i0, i1), max(i0, i1)
    return [Segment(path[k], path[k + 1], SegmentKind.FAILED_SWAP) for k in range(lo, hi)]


def interpret_outcomes(result: ConnectionResult) -> List[Segment]:
    """
    Convert a connection result into ordered, outcome-tagged segments.

    Segments follow the order operations were received in. A failed swap
    contributes its whole run of hops, in ascending path order, at its own
    position. Overlapping failed swaps may repeat a hop; duplicates are kept.
    """
    segments: List[Segment] = []
    for op in result.operations:
        if isinstance(op, LinkGeneration):
            kind = SegmentKind.SUCCESS if op.succeeded else SegmentKind.FAILED_GENERATION
            segments.append(Segment(op.nodes[0], op.nodes[1], kind))
        elif op.failed:
            segments.extend(_failed_swap_segments(result.path, op))

    logger.debug(
        "interpreted %d operation(s) on path %s into %d segment(s)",
        len(result.operations),
        "-".join(result.path),
        len(segments),
    )
    return segments


def interpret_response(data: Mapping[str, Any]) -> List[Segment]:
    """Parse a raw backend record and interpret it in one call."""
    return interpret_outcomes(ConnectionResult.from_dict(data))
