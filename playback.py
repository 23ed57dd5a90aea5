"""
Reference player for compiled highlight schedules.

The compiler only guarantees logical offsets; this player walks an
instruction list in offset order and hands each instruction to a renderer
callback when its time comes. Starting a new schedule, or calling cancel(),
stops whatever the player was running.
"""

from __future__ import annotations

from itertools import groupby
from typing import Callable, Iterator, List, Optional, Sequence, Tuple
import logging
import threading
import time

from schedule_compiler import HighlightInstruction

logger = logging.getLogger(__name__)

Apply = Callable[[HighlightInstruction], None]


def timeline(
    instructions: Sequence[HighlightInstruction],
) -> Iterator[Tuple[int, List[HighlightInstruction]]]:
    """
    Group instructions by start offset, in offset order.

    Instructions sharing an offset keep their compiled order.
    """
    ordered = sorted(instructions, key=lambda inst: inst.start_offset_ms)
    for offset, group in groupby(ordered, key=lambda inst: inst.start_offset_ms):
        yield offset, list(group)


class SchedulePlayer:
    """
    Runs one schedule at a time against a renderer callback.

    clock returns seconds (monotonic); sleep(seconds) may return early and
    returns True when the run was cancelled meanwhile. Both are injectable so
    playback can be driven without real time passing.
    """

    def __init__(
        self,
        apply: Apply,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], bool]] = None,
    ) -> None:
        self._apply = apply
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        with self._lock:
            self._cancelled.set()

    def _wait(self, cancelled: threading.Event, seconds: float) -> bool:
        if self._sleep is not None:
            self._sleep(seconds)
            return cancelled.is_set()
        return cancelled.wait(seconds)

    def play(self, instructions: Sequence[HighlightInstruction]) -> int:
        """
        Block until the schedule has been applied or cancelled.

        Returns the number of instructions handed to the renderer.
        """
        with self._lock:
            self._cancelled.set()
            cancelled = threading.Event()
            self._cancelled = cancelled

        started = self._clock()
        applied = 0
        for offset, group in timeline(instructions):
            delay = started + offset / 1000.0 - self._clock()
            if delay > 0 and self._wait(cancelled, delay):
                break
            if cancelled.is_set():
                break
            for inst in group:
                self._apply(inst)
                applied += 1

        if cancelled.is_set():
            logger.debug("playback superseded after %d instruction(s)", applied)
        return applied
