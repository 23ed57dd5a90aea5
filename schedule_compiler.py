"""
Path-highlight schedule compiler.

Turns the ordered segment list of one entanglement request into a static,
timed list of highlight instructions. The compiler never looks at a clock:
every instruction carries an offset in milliseconds relative to the start of
playback, and executing them in real time is the renderer's job (see
playback.py for a reference player).

Pacing
------
- Ordinary hops (success, failed generation) are highlighted one after the
  other, ``step_ms`` apart.
- A run of consecutive failed-swap hops is presented as one event: the run
  is preceded by ``settle_delay_ms``, every hop in it is highlighted at the
  same offset, and the run as a whole then occupies ``group_duration_ms``.
- Every highlight is followed, ``fade_delay_ms`` after it was set, by a fade
  back to the neutral color lasting ``fade_duration_ms``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Container, Dict, List, Optional, Sequence, Tuple
import logging

from outcomes import Segment, SegmentKind

logger = logging.getLogger(__name__)


class HighlightAction(Enum):
    SET = "set"
    FADE_TO_NEUTRAL = "fadeToNeutral"


@dataclass(frozen=True)
class ScheduleTiming:
    """Millisecond constants that drive the compiler's cursor."""

    settle_delay_ms: int = 1000
    group_duration_ms: int = 2000
    step_ms: int = 700
    fade_delay_ms: int = 1000
    fade_duration_ms: int = 2500


@dataclass(frozen=True)
class HighlightPalette:
    success: str = "highlight-success"
    failure: str = "highlight-failure"
    neutral: str = "neutral"

    def color_for(self, kind: SegmentKind) -> str:
        return self.success if kind is SegmentKind.SUCCESS else self.failure


DEFAULT_TIMING = ScheduleTiming()
DEFAULT_PALETTE = HighlightPalette()


@dataclass(frozen=True)
class HighlightInstruction:
    """
    One timed directive for the renderer.

    For SET, color is applied at start_offset_ms and fade_duration_ms is 0.
    For FADE_TO_NEUTRAL, a transition to color (the neutral color) begins at
    start_offset_ms and lasts fade_duration_ms.
    """

    endpoints: Tuple[str, str]
    color: str
    start_offset_ms: int
    action: HighlightAction
    fade_duration_ms: int = 0

    @property
    def end_offset_ms(self) -> int:
        return self.start_offset_ms + self.fade_duration_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "endpoints": list(self.endpoints),
            "color": self.color,
            "startOffsetMs": self.start_offset_ms,
            "action": self.action.value,
            "fadeDurationMs": self.fade_duration_ms,
        }


def _kind(item: Any) -> Optional[SegmentKind]:
    kind = getattr(item, "kind", None)
    return kind if isinstance(kind, SegmentKind) else None


def _highlight(
    segment: Segment,
    color: str,
    t: int,
    timing: ScheduleTiming,
    palette: HighlightPalette,
) -> List[HighlightInstruction]:
    return [
        HighlightInstruction(segment.endpoints, color, t, HighlightAction.SET),
        HighlightInstruction(
            segment.endpoints,
            palette.neutral,
            t + timing.fade_delay_ms,
            HighlightAction.FADE_TO_NEUTRAL,
            timing.fade_duration_ms,
        ),
    ]


def compile_schedule(
    segments: Sequence[Segment],
    timing: ScheduleTiming = DEFAULT_TIMING,
    palette: HighlightPalette = DEFAULT_PALETTE,
    known_nodes: Optional[Container[str]] = None,
) -> Tuple[HighlightInstruction, ...]:
    """
    Compile segments into an ordered, immutable instruction list.

    When known_nodes is given, segments touching other nodes still consume
    their time slot but produce no instructions. Items that are not segments
    are skipped without advancing the cursor.
    """
    instructions: List[HighlightInstruction] = []
    t = 0
    i = 0
    n = len(segments)

    def renderable(segment: Segment) -> bool:
        if known_nodes is None:
            return True
        ok = segment.source in known_nodes and segment.target in known_nodes
        if not ok:
            logger.warning("segment %s-%s references an unknown node", segment.source, segment.target)
        return ok

    while i < n:
        segment = segments[i]
        kind = _kind(segment)

        if kind is SegmentKind.FAILED_SWAP:
            if i == 0 or _kind(segments[i - 1]) is not SegmentKind.FAILED_SWAP:
                t += timing.settle_delay_ms
            j = i
            while j < n and _kind(segments[j]) is SegmentKind.FAILED_SWAP:
                if renderable(segments[j]):
                    instructions.extend(_highlight(segments[j], palette.failure, t, timing, palette))
                j += 1
            logger.debug("failed-swap run of %d segment(s) at t=%d", j - i, t)
            t += timing.group_duration_ms
            i = j
        elif kind is not None:
            if renderable(segment):
                instructions.extend(_highlight(segment, palette.color_for(kind), t, timing, palette))
            t += timing.step_ms
            i += 1
        else:
            logger.warning("skipping malformed segment #%d: %r", i, segment)
            i += 1

    return tuple(instructions)


def total_duration_ms(instructions: Sequence[HighlightInstruction]) -> int:
    """Offset at which the last transition of a schedule finishes."""
    return max((inst.end_offset_ms for inst in instructions), default=0)


def instructions_to_dicts(instructions: Sequence[HighlightInstruction]) -> List[Dict[str, Any]]:
    return [inst.to_dict() for inst in instructions]
